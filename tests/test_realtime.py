from datenova.services.realtime import ChangeFeed


def test_publish_reaches_matching_subscribers_only():
    feed = ChangeFeed()
    mine, everything = [], []
    feed.subscribe("notifications", "INSERT", {"user_id": "u1"}, mine.append)
    feed.subscribe("notifications", "*", None, everything.append)

    assert feed.publish("notifications", "INSERT", {"id": "n1", "user_id": "u1"}) == 2
    assert feed.publish("notifications", "INSERT", {"id": "n2", "user_id": "u2"}) == 1
    assert feed.publish("notifications", "UPDATE", {"id": "n1", "user_id": "u1"}) == 1
    assert feed.publish("tareas", "INSERT", {"id": "t1"}) == 0

    assert [r["id"] for r in mine] == ["n1"]
    assert [r["id"] for r in everything] == ["n1", "n2", "n1"]


def test_unsubscribe_stops_delivery():
    feed = ChangeFeed()
    rows = []
    subscription = feed.subscribe("notifications", "INSERT", None, rows.append)
    subscription.unsubscribe()
    feed.publish("notifications", "INSERT", {"id": "n1"})
    assert rows == []
    assert feed.subscriber_count == 0


def test_failing_callback_does_not_block_others():
    feed = ChangeFeed()
    rows = []

    def broken(row):
        raise RuntimeError("boom")

    feed.subscribe("notifications", "INSERT", None, broken)
    feed.subscribe("notifications", "INSERT", None, rows.append)
    feed.publish("notifications", "INSERT", {"id": "n1"})
    assert rows == [{"id": "n1"}]
