"""
RoleReady - resume skill extraction and role readiness.

This package contains modules for:
- Text extraction from PDF and DOCX resumes
- Rule-based skill matching against a skill catalog
- Skill suggestions from resumes and GitHub repositories
- Readiness and ATS compatibility scoring
"""

__version__ = "1.0.0"
