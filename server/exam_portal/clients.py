"""
Client-side notifiers for the proctoring channel.

StudentTabMonitor turns page visibility changes into `exam_tab_switch` frames.
TeacherAlertFeed keeps the live alert list of a teacher dashboard.
monitor_teacher_alerts is a console teacher client:

    exam-portal-teacher-monitor --url ws://127.0.0.1:5000/ws
"""
import argparse
import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import websockets

from exam_portal.models.alert import AlertReason
from exam_portal.timeutils import start_of_day, utcnow

logger = logging.getLogger(__name__)

DEFAULT_WS_URL = "ws://127.0.0.1:5000/ws"


def envelope(event: str, data: Dict[str, Any]) -> str:
    return json.dumps({"event": event, "data": data})


class StudentTabMonitor:
    """Emits one tab-switch event per visible -> hidden transition while an exam is running."""

    def __init__(self, student: str, exam_id: str):
        self.student = student
        self.exam_id = exam_id
        self.active = False
        self.hidden = False

    def start_exam(self) -> None:
        self.active = True
        self.hidden = False

    def finish_exam(self) -> None:
        self.active = False

    def on_visibility_change(self, hidden: bool) -> Optional[Dict[str, Any]]:
        """Returns the `exam_tab_switch` frame to send, or None."""
        became_hidden = hidden and not self.hidden
        self.hidden = hidden
        if not (self.active and became_hidden):
            return None
        return {
            "event": "exam_tab_switch",
            "data": {"student": self.student, "examId": self.exam_id},
        }


class TeacherAlertFeed:
    """
    Live alert list for a teacher, newest first, holding at most `limit` entries.
    `alerts_today` restarts when an alert from a later day arrives.
    """

    def __init__(self, limit: int = 10, timezone_name: str = "UTC"):
        self.limit = limit
        self.timezone_name = timezone_name
        self.alerts: List[Dict[str, Any]] = []
        self.alerts_today = 0
        self.day: Optional[datetime] = None
        self._local_ids = 0

    def _day_of(self, timestamp: Any) -> datetime:
        try:
            moment = datetime.fromisoformat(str(timestamp).replace("Z", "+00:00"))
        except ValueError:
            moment = utcnow()
        return start_of_day(moment, self.timezone_name)

    def load_dashboard(self, dashboard: Dict[str, Any]) -> None:
        """Seed from `GET /api/teacher/dashboard`."""
        self.alerts = list(dashboard.get("alerts", []))[: self.limit]
        self.alerts_today = dashboard.get("stats", {}).get("alertsToday", 0)
        self.day = start_of_day(utcnow(), self.timezone_name)

    def on_alert(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        # Live alerts have no store id yet; negative ids never clash with persisted ones.
        self._local_ids -= 1
        entry = {
            "id": self._local_ids,
            "student": payload.get("student", "Unknown"),
            "exam": payload.get("examId", "N/A"),
            "reason": AlertReason.TAB_SWITCH.value,
            "time": payload.get("timestamp"),
        }
        self.alerts.insert(0, entry)
        del self.alerts[self.limit :]

        day = self._day_of(payload.get("timestamp"))
        if self.day is None or day > self.day:
            self.day = day
            self.alerts_today = 0
        if day == self.day:
            self.alerts_today += 1
        return entry

    def visible(self, limit: int = 6) -> List[Dict[str, Any]]:
        return self.alerts[:limit]


async def monitor_teacher_alerts(
    url: str = DEFAULT_WS_URL,
    feed: Optional[TeacherAlertFeed] = None,
    reconnect_delay: float = 5.0,
    max_reconnects: Optional[int] = None,
) -> TeacherAlertFeed:
    """
    Listen for teacher alerts, registering as TEACHER on every (re)connect
    since the server forgets roles when a connection drops.
    """
    feed = feed or TeacherAlertFeed()
    reconnects = 0
    while True:
        try:
            async with websockets.connect(url) as websocket:
                await websocket.send(envelope("register_role", {"role": "TEACHER"}))
                logger.info("✅ Connected, listening for violation alerts...")
                async for message in websocket:
                    try:
                        frame = json.loads(message)
                    except json.JSONDecodeError as e:
                        logger.warning(f"❌ Error parsing message: {e}")
                        continue
                    if frame.get("event") == "teacher_alert":
                        entry = feed.on_alert(frame.get("data", {}))
                        print(f"🚨 {entry['time']}  {entry['student']}  {entry['exam']}  {entry['reason']}")
                    elif frame.get("event") == "new-exam":
                        print(f"📢 New exam added: {frame.get('data', {}).get('title')}")
        except (OSError, websockets.exceptions.WebSocketException) as e:
            logger.warning(f"❌ Connection error: {e}")

        reconnects += 1
        if max_reconnects is not None and reconnects > max_reconnects:
            return feed
        logger.info(f"⏳ Reconnecting in {reconnect_delay:g} seconds...")
        await asyncio.sleep(reconnect_delay)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Live proctoring alerts for teachers")
    parser.add_argument("--url", default=DEFAULT_WS_URL)
    parser.add_argument("--reconnect-delay", type=float, default=5.0)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    try:
        asyncio.run(monitor_teacher_alerts(args.url, reconnect_delay=args.reconnect_delay))
    except KeyboardInterrupt:
        print("\n👋 Monitor stopped by user")


if __name__ == "__main__":
    main()
