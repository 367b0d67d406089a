"""Core operations.

Each operation is a plain function of its explicit inputs (plus optional
`settings`/`runner` for injection). None of them keeps state between calls.
"""

from adapters.profile_store import load_profile, save_profile
from core.services.doctor import doctor_check
from core.services.generator import generate_files
from core.services.identity import resolve_identity
from core.services.lanes import run_lane
from core.services.scanner import scan_project

__all__ = [
    "doctor_check",
    "generate_files",
    "load_profile",
    "resolve_identity",
    "run_lane",
    "save_profile",
    "scan_project",
]
