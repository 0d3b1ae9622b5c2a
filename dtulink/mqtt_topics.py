"""MQTT subscription matching and callback dispatch."""

from dataclasses import dataclass
from typing import Any, Callable, List

_WILDCARDS = ("+", "#")


class InvalidTopicError(ValueError):
    """A topic or subscription is malformed."""


def _at(text: str, index: int) -> str:
    return text[index] if index < len(text) else ""


def _check_no_wildcards(text: str) -> None:
    if any(ch in _WILDCARDS for ch in text):
        raise InvalidTopicError(f"wildcard in topic: {text!r}")


def topic_matches_sub(sub: str, topic: str) -> bool:
    """Return whether ``topic`` matches the subscription pattern ``sub``.

    Raises InvalidTopicError for malformed patterns or topics.
    """
    if not sub or not topic:
        raise InvalidTopicError("empty subscription or topic")

    if (sub[0] == "$") != (topic[0] == "$"):
        return False

    s = 0
    t = 0
    while s < len(sub):
        tc = _at(topic, t)
        if tc in _WILDCARDS:
            raise InvalidTopicError(f"wildcard in topic: {topic!r}")
        sc = sub[s]
        if sc != tc or tc == "":
            if sc == "+":
                if s > 0 and sub[s - 1] != "/":
                    raise InvalidTopicError(f"bad '+' in subscription: {sub!r}")
                if _at(sub, s + 1) not in ("", "/"):
                    raise InvalidTopicError(f"bad '+' in subscription: {sub!r}")
                s += 1
                while t < len(topic) and topic[t] != "/":
                    if topic[t] in _WILDCARDS:
                        raise InvalidTopicError(f"wildcard in topic: {topic!r}")
                    t += 1
                if t == len(topic) and s == len(sub):
                    return True
            elif sc == "#":
                if s > 0 and sub[s - 1] != "/":
                    raise InvalidTopicError(f"bad '#' in subscription: {sub!r}")
                if s + 1 != len(sub):
                    raise InvalidTopicError(f"'#' not last in subscription: {sub!r}")
                _check_no_wildcards(topic[t:])
                return True
            else:
                # e.g. foo/bar matching foo/+/#
                if (
                    t == len(topic)
                    and s > 0
                    and sub[s - 1] == "+"
                    and sc == "/"
                    and _at(sub, s + 1) == "#"
                ):
                    return True
                while s < len(sub):
                    if sub[s] == "#" and s + 1 < len(sub):
                        raise InvalidTopicError(
                            f"'#' not last in subscription: {sub!r}"
                        )
                    s += 1
                return False
        else:
            if t + 1 == len(topic):
                # e.g. foo matching foo/#
                if (
                    _at(sub, s + 1) == "/"
                    and _at(sub, s + 2) == "#"
                    and s + 3 == len(sub)
                ):
                    return True
            s += 1
            t += 1
            if s == len(sub) and t == len(topic):
                return True
            if t == len(topic) and _at(sub, s) == "+" and s + 1 == len(sub):
                if s > 0 and sub[s - 1] != "/":
                    raise InvalidTopicError(f"bad '+' in subscription: {sub!r}")
                return True

    _check_no_wildcards(topic[t:])
    return False


MessageCallback = Callable[[Any, str, bytes, int, int], None]


@dataclass
class Subscription:
    """A registered subscription pattern with its handler."""

    topic: str
    qos: int
    callback: MessageCallback


class MqttSubscribeParser:
    """Dispatches incoming messages to callbacks whose pattern matches."""

    def __init__(self) -> None:
        self._callbacks: List[Subscription] = []

    def register_callback(self, topic: str, qos: int, callback: MessageCallback) -> None:
        self._callbacks.append(Subscription(topic, qos, callback))

    def unregister_callback(self, topic: str) -> None:
        """Remove every subscription registered for exactly ``topic``."""
        self._callbacks = [cb for cb in self._callbacks if cb.topic != topic]

    def handle_message(
        self, properties: Any, topic: str, payload: bytes, index: int, total: int
    ) -> None:
        """Call each matching callback; malformed patterns are skipped."""
        for sub in list(self._callbacks):
            try:
                matched = topic_matches_sub(sub.topic, topic)
            except InvalidTopicError:
                continue
            if matched:
                sub.callback(properties, topic, payload, index, total)

    def callbacks(self) -> List[Subscription]:
        return list(self._callbacks)