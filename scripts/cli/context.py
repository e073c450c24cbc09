"""CLI wiring: one transport, one violation channel, the services on top."""

from dataclasses import dataclass

from progress_client import ApiClient, AuthService, FileSessionStore
from progress_config import ConsoleSettings
from progress_kernel.domain.clock import Clock, SystemClock
from progress_kernel.domain.violations import ViolationChannel
from progress_modules.business_rules import BusinessRuleService
from progress_modules.confirmation import ConfirmationService
from progress_modules.daywise import DayWiseUpdateService
from progress_modules.master_data import MasterCodeService
from progress_modules.planning import PlanVersionService
from progress_modules.projects import ProjectService, Task, Wbs
from progress_modules.resources import ResourceAllocationService


@dataclass
class ConsoleContext:
    client: ApiClient
    channel: ViolationChannel
    clock: Clock
    auth: AuthService
    projects: ProjectService
    updates: DayWiseUpdateService
    plans: PlanVersionService
    confirmations: ConfirmationService
    resources: ResourceAllocationService
    rules: BusinessRuleService
    master_codes: MasterCodeService
    wbs: Wbs | None = None
    task: Task | None = None


def build_context(settings: ConsoleSettings, clock: Clock | None = None) -> ConsoleContext:
    channel = ViolationChannel()
    client = ApiClient(
        settings.api_base_url,
        FileSessionStore(settings.session_file),
        channel,
        timeout=settings.request_timeout,
    )
    clock = clock or SystemClock()
    return ConsoleContext(
        client=client,
        channel=channel,
        clock=clock,
        auth=AuthService(client),
        projects=ProjectService(client),
        updates=DayWiseUpdateService(client),
        plans=PlanVersionService(client, clock),
        confirmations=ConfirmationService(client),
        resources=ResourceAllocationService(client),
        rules=BusinessRuleService(client),
        master_codes=MasterCodeService(client),
    )
