from fastapi import FastAPI

from .api import router, bind_engine
from .ancestry_matcher import AncestryMatcher
from .config import get_settings
from .policy_engine import PolicyEngine
from .rules import rule_from_settings


def build_engine() -> PolicyEngine:
    cfg = get_settings()
    return PolicyEngine(
        rule_from_settings(cfg),
        matcher=AncestryMatcher(max_depth=cfg.PROVENANCE_MAX_ANCESTRY_DEPTH),
    )


def create_app(engine=None):
    app = FastAPI(title="Provenance Guard")
    app.include_router(router)
    bind_engine(engine if engine is not None else build_engine())
    return app


# convenience for running locally
if __name__ == '__main__':
    import uvicorn
    from .logging_setup import setup_logging
    from .metrics import start_metrics_server_if_enabled
    setup_logging()
    start_metrics_server_if_enabled()
    uvicorn.run(create_app(), host='0.0.0.0', port=8002)
