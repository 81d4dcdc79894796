"""Enrollment and assessment engine for a learning-management backend."""
