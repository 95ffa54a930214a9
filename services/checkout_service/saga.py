import structlog
from shared.observability import ecomm_saga_compensation_total

log = structlog.get_logger(__name__)


class SagaStep:
    def __init__(self, name, action, compensation=None):
        self.name = name
        self.action = action
        self.compensation = compensation


class SagaOrchestrator:
    def __init__(self):
        self.steps = []

    def add_step(self, name: str, action, compensation=None):
        """Builder pattern to add a step and its rollback compensation."""
        self.steps.append(SagaStep(name, action, compensation))
        return self

    async def execute(self, ctx: dict):
        """
        Run the steps in order. When one raises, the compensations of the
        steps that already completed run in reverse order and the original
        exception is re-raised.
        """
        executed_steps = []
        for step in self.steps:
            try:
                await step.action(ctx)
            except Exception as e:
                log.warning("saga_step_failed", step=step.name, error=str(e) or type(e).__name__)
                await self._rollback(executed_steps, ctx)
                raise
            executed_steps.append(step)
        return True

    async def _rollback(self, executed_steps: list, ctx: dict):
        for step in reversed(executed_steps):
            if not step.compensation:
                continue
            try:
                await step.compensation(ctx)
                log.info("saga_compensation_succeeded", step=step.name)
                ecomm_saga_compensation_total.labels(step_name=step.name).inc()
            except Exception as ce:
                # A failing compensation must not block the others
                log.critical(
                    "saga_compensation_failed",
                    step=step.name,
                    error=str(ce),
                    note="manual intervention may be required",
                )
