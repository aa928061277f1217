from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .action_models import ActionRequest, FloatFade, IntFade
from .action_validate import VariableResolver, normalize_and_validate_action
from .message_models import ScheduledEmission
from .ramp_planner import plan_float_ramp, plan_integer_ramp, ramp_emissions
from .scheduler import EmissionScheduler, MessageSink


@dataclass(frozen=True)
class ActionExecutionResult:
    ok: bool
    payload: Dict[str, Any]
    status: int
    emissions: List[ScheduledEmission] = field(default_factory=list)


def build_emissions(request: ActionRequest) -> List[ScheduledEmission]:
    fade = request.fade
    if isinstance(fade, IntFade):
        return ramp_emissions(plan_integer_ramp(fade.start, fade.end, fade.duration_ms), request.path)
    if isinstance(fade, FloatFade):
        plan = plan_float_ramp(fade.start, fade.end, fade.duration_ms, fade.granularity)
        return ramp_emissions(plan, request.path)
    return [ScheduledEmission(delay_ms=0.0, path=request.path, payload=tuple(request.args))]


class ActionRunner:
    def __init__(self, scheduler: EmissionScheduler):
        self._scheduler = scheduler

    def execute(
        self,
        *,
        action_id: str,
        options: Mapping[str, Any],
        sink: Optional[MessageSink],
        resolve_variables: Optional[VariableResolver] = None,
    ) -> ActionExecutionResult:
        ok, request, msg = normalize_and_validate_action(action_id, options, resolve_variables=resolve_variables)
        if not ok or request is None:
            return ActionExecutionResult(ok=False, payload={"ok": False, "error": msg}, status=400)

        try:
            emissions = build_emissions(request)
        except ValueError as e:
            return ActionExecutionResult(ok=False, payload={"ok": False, "error": f"invalid numeric parameter: {e}"}, status=400)

        if sink is None:
            return ActionExecutionResult(
                ok=False,
                payload={"ok": False, "error": "OSC target not available (check host/port config)."},
                status=503,
            )

        scheduled = self._scheduler.schedule(emissions, sink)

        return ActionExecutionResult(
            ok=True,
            payload={
                "ok": True,
                "action": request.action_id,
                "path": request.path,
                "fade": request.fade is not None,
                "scheduled": int(scheduled),
                "args": [a.to_dict() for a in request.args],
            },
            status=200,
            emissions=emissions,
        )
