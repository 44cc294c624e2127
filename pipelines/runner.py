from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, List, Optional

from utils.logging_setup import init_logging


@dataclass
class RunContext:
    user_id: str = ""
    target_url: str = ""
    is_own_profile: bool = False
    retry: bool = False
    normalized_url: Optional[str] = None
    already_exists: bool = False
    existing_record: Any = None
    result: Any = None
    error: Optional[Exception] = None
    halted: bool = False
    meta: dict = field(default_factory=dict)


class Step(Protocol):
    def run(self, ctx: RunContext) -> RunContext:
        ...


class Pipeline:
    def __init__(self, steps: List[Step]):
        self.steps = steps

    def run(self, ctx: RunContext) -> RunContext:
        # Make logging idempotent for any direct runner use
        init_logging()
        for step in self.steps:
            if ctx.halted:
                break
            ctx = step.run(ctx)
        return ctx
