"""
PM Scan Engine - Backend Services
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Generation ledger and entity store
v1.0.0 (2026-10-05): Initial services module
"""

from . import code_predictor
from . import plan_matcher
from . import code_resolver
from . import sheet_normalizer
from . import sheet_client
from . import pm_generator
from . import generation_ledger
from . import entity_store
