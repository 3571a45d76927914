import pytest

from pos import db
from pos.jobs.queue import JobQueue, ScheduledAction, ActionStatus, get_job_queue

# 2026-03-15 13:45:00 UTC
NOW = 1773582300
# 2026-03-16 00:00:00 UTC
TOMORROW_MIDNIGHT = 1773619200
# 2026-03-17 00:00:00 UTC
DAY_AFTER_MIDNIGHT = 1773705600


@pytest.fixture
def queue(queue_app):
    return get_job_queue(queue_app)


def test_queue_absent_unless_enabled(app):
    assert get_job_queue(app) is None


def test_schedule_cron_starts_at_next_match(queue):
    queue.schedule_cron(NOW, '0 0 * * *', 'nightly', ['a'], 'reports')

    action = ScheduledAction.query.one()
    assert action.scheduled_timestamp == TOMORROW_MIDNIGHT
    assert action.args == ['a']
    assert action.group == 'reports'
    assert action.status == ActionStatus.PENDING.value


def test_schedule_cron_includes_exact_match(queue):
    queue.schedule_cron(TOMORROW_MIDNIGHT, '0 0 * * *', 'nightly')
    assert queue.next_scheduled('nightly') == TOMORROW_MIDNIGHT


def test_invalid_cron_expression_rejected(queue):
    with pytest.raises(ValueError):
        queue.schedule_cron(NOW, 'every night', 'nightly')
    assert ScheduledAction.query.count() == 0


def test_next_scheduled_returns_earliest(queue):
    queue.schedule_single(NOW + 600, 'ping')
    queue.schedule_single(NOW + 60, 'ping')

    assert queue.next_scheduled('ping') == NOW + 60
    assert queue.next_scheduled('pong') is None


def test_next_scheduled_filters_args_and_group(queue):
    queue.schedule_single(NOW + 60, 'ping', [1], 'a')
    queue.schedule_single(NOW + 120, 'ping', [2], 'b')

    assert queue.next_scheduled('ping', args=[2]) == NOW + 120
    assert queue.next_scheduled('ping', group='a') == NOW + 60
    assert queue.next_scheduled('ping', args=[1], group='b') is None


def test_unschedule_all_cancels_pending(queue):
    queue.schedule_single(NOW + 60, 'ping')
    queue.schedule_cron(NOW, '0 0 * * *', 'ping')
    queue.schedule_single(NOW + 60, 'other')

    assert queue.unschedule_all('ping') == 2
    assert queue.unschedule_all('ping') == 0
    assert queue.next_scheduled('ping') is None
    assert queue.next_scheduled('other') == NOW + 60


def test_run_due_runs_callbacks_and_reschedules(queue):
    calls = []
    queue.add_action('nightly', lambda *args: calls.append(args))
    queue.schedule_cron(NOW, '0 0 * * *', 'nightly', ['x'])

    assert queue.run_due(NOW) == []

    ran = queue.run_due(TOMORROW_MIDNIGHT)
    assert len(ran) == 1
    assert calls == [('x',)]
    assert db.session.get(ScheduledAction, ran[0]).status == ActionStatus.COMPLETE.value
    assert queue.next_scheduled('nightly') == DAY_AFTER_MIDNIGHT


def test_failed_action_is_recorded_and_still_rescheduled(queue):
    def explode():
        raise RuntimeError('boom')

    queue.add_action('nightly', explode)
    queue.schedule_cron(NOW, '0 0 * * *', 'nightly')

    ran = queue.run_due(TOMORROW_MIDNIGHT)

    action = db.session.get(ScheduledAction, ran[0])
    assert action.status == ActionStatus.FAILED.value
    assert action.error == 'boom'
    assert queue.next_scheduled('nightly') == DAY_AFTER_MIDNIGHT


def test_single_action_is_not_rescheduled(queue):
    queue.schedule_single(NOW, 'once')

    assert len(queue.run_due(NOW)) == 1
    assert queue.next_scheduled('once') is None


def test_cron_evaluated_in_queue_timezone(queue_app):
    queue = JobQueue(timezone_name='America/New_York')
    # 2026-03-16 04:00:00 UTC is midnight in New York
    assert queue.next_cron_occurrence('0 0 * * *', NOW) == 1773633600
