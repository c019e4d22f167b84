from .scheduler import JobScheduler, PeriodicJob, deadline_check_job, weekly_update_check_job, approval_reminder_job

__all__ = [
    "JobScheduler",
    "PeriodicJob",
    "deadline_check_job",
    "weekly_update_check_job",
    "approval_reminder_job",
]
