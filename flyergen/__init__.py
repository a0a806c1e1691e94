"""
FlyerGen: AI event-flyer generation service.

Packages:
- core: logging and the database layer (entities, repositories, I/O schemas)
- providers: pluggable image-generation provider clients with fallback
- billing: subscription plans and Stripe integration
- server: the FastAPI application
"""

__version__ = "1.0.0"
