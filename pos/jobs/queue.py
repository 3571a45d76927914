"""Recurring and one-off background actions"""
from calendar import timegm
from datetime import datetime, timezone, timedelta
from zoneinfo import ZoneInfo
from croniter import croniter
from flask import current_app
from pos import db
from pos.core.db import BaseModel, JSONType, commit_or_rollback
from enum import Enum
import logging

logger = logging.getLogger(__name__)

class ActionStatus(Enum):
    """Scheduled action status enumeration"""
    PENDING = 'pending'
    RUNNING = 'running'
    COMPLETE = 'complete'
    FAILED = 'failed'
    CANCELED = 'canceled'

def to_datetime(timestamp):
    """Convert an epoch timestamp to a naive UTC datetime"""
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc).replace(tzinfo=None)

def to_timestamp(value):
    """Convert a naive UTC datetime to an epoch timestamp"""
    return timegm(value.utctimetuple())

class ScheduledAction(BaseModel):
    """A queued occurrence of a hook"""
    __tablename__ = 'scheduled_actions'

    hook = db.Column(db.String(191), nullable=False, index=True)
    args = db.Column(JSONType, default=list)
    group = db.Column(db.String(191), nullable=False, default='', index=True)
    status = db.Column(db.String(20), nullable=False, default=ActionStatus.PENDING.value, index=True)

    # Naive UTC
    scheduled_at = db.Column(db.DateTime, nullable=False, index=True)
    cron_expression = db.Column(db.String(100), nullable=True)
    last_attempt_at = db.Column(db.DateTime, nullable=True)
    error = db.Column(db.Text, nullable=True)

    def __repr__(self):
        return f'<ScheduledAction {self.hook} at {self.scheduled_at}>'

    @property
    def is_recurring(self):
        return bool(self.cron_expression)

    @property
    def scheduled_timestamp(self):
        return to_timestamp(self.scheduled_at)

class JobQueue:
    """Database-backed action queue with cron schedules"""

    def __init__(self, app=None, timezone_name=None):
        self.timezone_name = timezone_name
        self.actions = {}
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Attach the queue to a Flask application"""
        if self.timezone_name is None:
            self.timezone_name = app.config.get('POS_TIMEZONE', 'UTC')
        app.extensions['pos_job_queue'] = self

    @property
    def tz(self):
        return ZoneInfo(self.timezone_name or 'UTC')

    def add_action(self, hook, callback):
        """Register a callback run for every due occurrence of hook"""
        self.actions.setdefault(hook, []).append(callback)

    def _pending(self, hook, args=None, group=None):
        query = ScheduledAction.query.filter_by(hook=hook, status=ActionStatus.PENDING.value)
        if group is not None:
            query = query.filter_by(group=group)
        actions = query.order_by(ScheduledAction.scheduled_at, ScheduledAction.id).all()
        # JSON columns cannot be compared portably in SQL
        if args is not None:
            actions = [action for action in actions if (action.args or []) == list(args)]
        return actions

    def next_scheduled(self, hook, args=None, group=None):
        """Get the timestamp of the next pending occurrence, or None"""
        actions = self._pending(hook, args, group)
        if not actions:
            return None
        return actions[0].scheduled_timestamp

    def unschedule_all(self, hook, args=None, group=None):
        """Cancel every pending occurrence of hook, returning how many"""
        actions = self._pending(hook, args, group)
        if not actions:
            return 0

        with commit_or_rollback():
            for action in actions:
                action.status = ActionStatus.CANCELED.value

        logger.info(f"Unscheduled {len(actions)} pending action(s) for {hook}")
        return len(actions)

    def next_cron_occurrence(self, cron_expression, after, inclusive=False):
        """First cron match after (or at, when inclusive) an epoch timestamp"""
        base = datetime.fromtimestamp(int(after), tz=self.tz)
        if inclusive:
            base = base - timedelta(seconds=1)
        next_run = croniter(cron_expression, base).get_next(datetime)
        return int(next_run.timestamp())

    def schedule_single(self, timestamp, hook, args=None, group=''):
        """Queue a one-off occurrence of hook"""
        action = ScheduledAction(
            hook=hook,
            args=list(args or []),
            group=group or '',
            scheduled_at=to_datetime(timestamp)
        )
        with commit_or_rollback() as session:
            session.add(action)

        logger.info(f"Scheduled {hook} at {action.scheduled_at} UTC")
        return action.id

    def schedule_cron(self, timestamp, cron_expression, hook, args=None, group=''):
        """Queue a recurring occurrence of hook.

        The first occurrence is the first match of cron_expression at or
        after timestamp, evaluated in the queue's timezone.
        """
        if not croniter.is_valid(cron_expression):
            raise ValueError(f"Invalid cron expression: {cron_expression}")

        first_run = self.next_cron_occurrence(cron_expression, timestamp, inclusive=True)
        action = ScheduledAction(
            hook=hook,
            args=list(args or []),
            group=group or '',
            scheduled_at=to_datetime(first_run),
            cron_expression=cron_expression
        )
        with commit_or_rollback() as session:
            session.add(action)

        logger.info(f"Scheduled {hook} ({cron_expression}) starting {action.scheduled_at} UTC in group '{action.group}'")
        return action.id

    def run_due(self, now=None):
        """Run every pending action due at now and reschedule recurring ones.

        Returns the ids of the actions that were run.
        """
        now = int(now if now is not None else datetime.now(timezone.utc).timestamp())
        due = ScheduledAction.query.filter(
            ScheduledAction.status == ActionStatus.PENDING.value,
            ScheduledAction.scheduled_at <= to_datetime(now)
        ).order_by(ScheduledAction.scheduled_at, ScheduledAction.id).all()

        run_ids = []
        for action in due:
            action.status = ActionStatus.RUNNING.value
            action.last_attempt_at = to_datetime(now)
            db.session.commit()

            callbacks = self.actions.get(action.hook, [])
            if not callbacks:
                logger.warning(f"No callbacks registered for {action.hook}")

            try:
                for callback in callbacks:
                    callback(*(action.args or []))
                action.status = ActionStatus.COMPLETE.value
            except Exception as e:
                logger.error(f"Action {action.hook} (ID: {action.id}) failed: {str(e)}")
                action.status = ActionStatus.FAILED.value
                action.error = str(e)

            with commit_or_rollback():
                # Recurring actions are rescheduled whatever the outcome
                if action.is_recurring:
                    next_run = self.next_cron_occurrence(action.cron_expression, now)
                    db.session.add(ScheduledAction(
                        hook=action.hook,
                        args=list(action.args or []),
                        group=action.group,
                        scheduled_at=to_datetime(next_run),
                        cron_expression=action.cron_expression
                    ))
            run_ids.append(action.id)

        if run_ids:
            logger.info(f"Ran {len(run_ids)} due action(s)")
        return run_ids

def get_job_queue(app=None):
    """Get the job queue attached to the application, or None"""
    app = app or current_app
    return app.extensions.get('pos_job_queue')
