"""Shared infrastructure for FlyerGen: logging configuration and the database layer."""
