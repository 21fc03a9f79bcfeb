"""Live machine job tracking and job completion reports."""
