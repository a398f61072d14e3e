"""
Assessment Models Registry

This module serves as the central models registry for the assessments app.
It imports and exposes all models from the logical submodules (content,
attempts) so that they are registered with Django's ORM under one app label.

Architecture:
- content/: AssessableContent and its ordered Items
- attempts/: Attempt history and assignment Submissions

Author: DSP Development Team
Version: 1.0.0
"""

from .content.models import *  # noqa: F401,F403
from .attempts.models import *  # noqa: F401,F403
