"""Verification package: ask hosted chat engines and look for the company name."""

from flowql.verification.engines import ChatEngine, default_engines
from flowql.verification.models import EngineResult, VerificationResult
from flowql.verification.verifier import check_engine, engine_availability, verify

__all__ = [
    "ChatEngine",
    "default_engines",
    "EngineResult",
    "VerificationResult",
    "verify",
    "check_engine",
    "engine_availability",
]
