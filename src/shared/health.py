from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health(request: Request):
    state = request.app.state
    return {
        "ok": True,
        "strategy": state.resolution_service.policy.strategy.value,
        "pending_waiters": len(state.registry),
        "metrics": state.metrics.get_metrics(),
    }
