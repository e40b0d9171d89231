import time
from typing import Set, Tuple


_scheduled_round_keys: Set[Tuple[str, int]] = set()


def schedule_round_timer(app, code: str, round_number: int, deadline: float) -> None:
    """End the given round server-side once its deadline passes.

    - No-ops unless ROUND_AUTO_END is set
    - No-ops in TESTING unless ENABLE_SCHEDULER_IN_TESTS; then runs inline
    - Ensures a single timer per (code, round)
    """
    if not app.config.get('ROUND_AUTO_END'):
        return
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return

    key = (code, round_number)
    if key in _scheduled_round_keys:
        app.logger.info(f"[timer-skip] room={code} round={round_number} already scheduled")
        return
    _scheduled_round_keys.add(key)
    app.logger.info(f"[timer-set] room={code} round={round_number} deadline={deadline}")

    def _worker(expected_code: str, expected_round: int, until: float):
        sleep_for = max(0.0, until - time.time())
        if sleep_for:
            time.sleep(sleep_for)
        _scheduled_round_keys.discard((expected_code, expected_round))
        with app.app_context():
            machine = app.extensions['snapchaos']
            ended = machine.expire_round(expected_code, expected_round)
            app.logger.info(f"[timer-fire] room={expected_code} round={expected_round} ended={ended}")

    if app.config.get('TESTING'):
        _worker(code, round_number, deadline)
    else:
        app.extensions['socketio'].start_background_task(_worker, code, round_number, deadline)


def forget_room_timers(code: str) -> None:
    """Drop timer keys for a removed room so a recreated code starts clean."""
    for key in [k for k in _scheduled_round_keys if k[0] == code]:
        _scheduled_round_keys.discard(key)


def reap_rooms(app, ttl: int, now=None):
    removed = app.extensions['snapchaos'].store.reap_idle(ttl, now=now)
    for code in removed:
        forget_room_timers(code)
    return removed


def start_room_reaper(app) -> bool:
    """Periodically drop empty rooms idle for longer than ROOM_IDLE_TTL_SEC.

    Returns False when the reaper is disabled (TTL of 0) or under TESTING.
    """
    ttl = int(app.config.get('ROOM_IDLE_TTL_SEC', 0))
    if ttl <= 0 or app.config.get('TESTING'):
        return False
    interval = max(1, int(app.config.get('ROOM_REAPER_INTERVAL_SEC', 60)))

    def _loop():
        while True:
            time.sleep(interval)
            try:
                reap_rooms(app, ttl)
            except Exception:
                app.logger.exception('[reaper-error]')

    app.extensions['socketio'].start_background_task(_loop)
    app.logger.info(f"[reaper-start] ttl={ttl}s interval={interval}s")
    return True
