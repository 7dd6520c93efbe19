from fastapi import APIRouter, HTTPException
import logging

from .context_models import ExecutionContextSnapshot
from .diagnostics import MemoryDiagnosticsSink
from .policy_engine import PolicyEngine
from .schemas import ContextPayload, EvaluationResponse, RuleResponse

router = APIRouter()
logger = logging.getLogger(__name__)

# The engine is created by the application and bound here
_bound_engine: PolicyEngine = None


def bind_engine(e: PolicyEngine):
    global _bound_engine
    _bound_engine = e


def _engine() -> PolicyEngine:
    if _bound_engine is None or _bound_engine.rule is None:
        raise HTTPException(status_code=500, detail="policy engine not bound")
    return _bound_engine


@router.get("/health")
async def health():
    return {"status": "ok", "engine_bound": _bound_engine is not None}


@router.get("/rules", response_model=RuleResponse)
async def current_rule():
    return _engine().rule.to_dict()


@router.post("/evaluate", response_model=EvaluationResponse)
async def evaluate(payload: ContextPayload):
    engine = _engine()
    try:
        context = ExecutionContextSnapshot.from_dict(payload.model_dump())
    except ValueError as e:
        logger.warning("rejected context payload: %s", e)
        raise HTTPException(status_code=422, detail=str(e))
    sink = MemoryDiagnosticsSink()
    result = engine.evaluate(context, diagnostics=sink)
    return {**result.to_dict(), "advisories": list(sink.messages)}
