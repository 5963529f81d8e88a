"""Reminder evaluation, deduplication and organization passes."""

from shaho.reminders.dedup import DeduplicationGate
from shaho.reminders.evaluator import ReminderEvaluator
from shaho.reminders.orchestrator import ReminderOrchestrator

__all__ = ["DeduplicationGate", "ReminderEvaluator", "ReminderOrchestrator"]
