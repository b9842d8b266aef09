"""
Smart Matching Module - offering-level compatibility (0-1).

- compatibility.py: the five dimension calculations
- models.py: RequesterNeeds, CompatibilityBreakdown, RankedResult
- service.py: SmartMatchingService pipeline (search + score + rank)
"""
from core.matcher.models import RequesterNeeds, CompatibilityBreakdown, RankedResult
from core.matcher.service import SmartMatchingService

__all__ = [
    'RequesterNeeds',
    'CompatibilityBreakdown',
    'RankedResult',
    'SmartMatchingService',
]
