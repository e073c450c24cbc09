"""CLI views: navigation, day-wise grid, plans, confirmations, resources, project structure, rules, master data."""

from scripts.cli.views.business_rules import show_business_rules
from scripts.cli.views.confirmations import show_confirmations
from scripts.cli.views.daywise import show_daywise
from scripts.cli.views.master_data import show_master_data
from scripts.cli.views.plans import show_plans
from scripts.cli.views.project_admin import show_project_admin
from scripts.cli.views.projects import show_navigator
from scripts.cli.views.resources import show_resources
from scripts.cli.views.violation import GlobalViolationModal, ViolationModal

__all__ = [
    "GlobalViolationModal",
    "ViolationModal",
    "show_business_rules",
    "show_confirmations",
    "show_daywise",
    "show_master_data",
    "show_navigator",
    "show_plans",
    "show_project_admin",
    "show_resources",
]
