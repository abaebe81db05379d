# bookshare/tasks/scheduler.py
from __future__ import annotations

import atexit
import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from bookshare.tasks.reminders import run_reminder_job


def start_scheduler(app):
    """
    Start the loan reminder job in a background thread.
    - Skipped when SCHEDULER_ENABLED is off (tests) or in the reloader's parent process.
    - The job runs inside an app context.
    """
    if not app.config.get("SCHEDULER_ENABLED", False):
        return None

    # Werkzeug reloader runs two processes; only the one with WERKZEUG_RUN_MAIN=true serves requests
    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        app.logger.info("[scheduler] Debug reloader secondary process: scheduler skipped.")
        return None

    scheduler = BackgroundScheduler(timezone="UTC")
    minutes = app.config.get("REMINDER_INTERVAL_MINUTES", 60)

    scheduler.add_job(
        func=run_reminder_job,
        args=[app],
        trigger=IntervalTrigger(minutes=minutes),
        id="loan_reminder_job",
        replace_existing=True,
        max_instances=1,        # never overlap
        coalesce=True,          # collapse missed runs
        misfire_grace_time=120
    )

    scheduler.start()
    app.logger.info(f"[scheduler] Loan reminder job started (every {minutes} minutes).")
    app.extensions["apscheduler"] = scheduler
    atexit.register(lambda: scheduler.shutdown(wait=False))
    return scheduler
