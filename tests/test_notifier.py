import json
import socket

from whistlefinder.system.notifier import ConsoleNotifier, UDPNotifier


def test_console_notifier_replaces_by_id():
    notifier = ConsoleNotifier()
    notifier.publish("WHISTLE_ALARM", "WhistleFinder", "first")
    notifier.publish("WHISTLE_ALARM", "WhistleFinder", "second")
    assert notifier.pending == {"WHISTLE_ALARM": ("WhistleFinder", "second")}
    notifier.withdraw("WHISTLE_ALARM")
    notifier.withdraw("WHISTLE_ALARM")
    assert notifier.pending == {}


def test_udp_notifier_sends_json():
    receiver = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    receiver.bind(("127.0.0.1", 0))
    receiver.settimeout(2.0)
    port = receiver.getsockname()[1]
    notifier = UDPNotifier("127.0.0.1", port)
    try:
        notifier.publish("WHISTLE_ALARM", "WhistleFinder", "Whistle detected")
        msg = json.loads(receiver.recvfrom(2048)[0].decode("utf-8"))
        assert msg["type"] == "notification"
        assert msg["id"] == "WHISTLE_ALARM"
        assert msg["body"] == "Whistle detected"

        notifier.withdraw("WHISTLE_ALARM")
        msg = json.loads(receiver.recvfrom(2048)[0].decode("utf-8"))
        assert msg == {"type": "withdraw", "id": "WHISTLE_ALARM", "ts": msg["ts"]}
    finally:
        notifier.close()
        receiver.close()
