"""
Timeline Templates Module
Standard task timelines per photography session type
"""

from .branding import get_branding_template
from .executive import get_executive_template
from .family import get_family_template
from .portrait import get_portrait_template

__all__ = [
    "get_branding_template",
    "get_portrait_template",
    "get_executive_template",
    "get_family_template",
    "get_standard_templates",
]


def get_standard_templates():
    """All standard templates, in the order they are seeded"""
    return [
        get_branding_template(),
        get_portrait_template(),
        get_executive_template(),
        get_family_template(),
    ]
