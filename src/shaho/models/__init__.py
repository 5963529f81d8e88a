"""Pydantic models for applications, employees, organizations and notifications."""
