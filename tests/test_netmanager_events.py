from netmanager.events import EventChannel


def test_handlers_called_in_registration_order():
    channel = EventChannel()
    seen = []
    channel.on("change", lambda v: seen.append(("first", v)))
    channel.on("change", lambda v: seen.append(("second", v)))

    assert channel.emit("change", "WIFI") == 2
    assert seen == [("first", "WIFI"), ("second", "WIFI")]


def test_same_handler_registered_once():
    channel = EventChannel()
    seen = []

    def handler(v):
        seen.append(v)

    sub1 = channel.on("change", handler)
    sub2 = channel.on("change", handler)
    assert sub1 is sub2
    channel.emit("change", 1)
    assert seen == [1]
    assert channel.listener_count("change") == 1


def test_unsubscribe_detaches_handler():
    channel = EventChannel()
    seen = []
    sub = channel.on("change", seen.append)
    channel.emit("change", "A")
    sub.unsubscribe()
    sub.unsubscribe()
    channel.emit("change", "B")
    assert seen == ["A"]
    assert not sub.active
    assert channel.listener_count("change") == 0


def test_subscription_as_context_manager():
    channel = EventChannel()
    seen = []
    with channel.on("change", seen.append):
        channel.emit("change", 1)
    channel.emit("change", 2)
    assert seen == [1]


def test_handler_may_unsubscribe_during_emit():
    channel = EventChannel()
    seen = []
    subs = {}

    def once(v):
        seen.append(("once", v))
        subs["once"].unsubscribe()

    subs["once"] = channel.on("change", once)
    channel.on("change", lambda v: seen.append(("always", v)))
    channel.emit("change", 1)
    channel.emit("change", 2)
    assert seen == [("once", 1), ("always", 1), ("always", 2)]


def test_emit_without_handlers():
    assert EventChannel().emit("nothing", None) == 0
