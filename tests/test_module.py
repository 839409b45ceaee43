from interaction_data.messages import Message
from interaction_data.module import InteractionData
from interaction_data.session import parse_local_timestamp
from interaction_data.storage import InteractionDataModel

XHR = {"network": {"type": "POST", "url": "/wsapi/authenticate_user"}}
PREVIOUS = {"event_stream": [["screen.authenticate", 100]], "sample_rate": 1, "timestamp": 0}


def listen(mediator, msg):
    seen = []
    mediator.subscribe(msg, lambda name, data: seen.append(name))
    return seen


def test_end_to_end_sampled_session(make_module, mediator, model, network, clock):
    model.set_current(PREVIOUS)
    network.set_context(1.0, server_time=1_000_003)
    completed = listen(mediator, Message.SEND_COMPLETE)

    module = make_module()
    module.start()

    # previous session's data went out first
    assert network.sent == [[PREVIOUS]]
    assert completed == ["interaction_data_send_complete"]

    clock.advance(10)
    mediator.publish("a")
    mediator.publish("xhr_complete", XHR)
    mediator.publish("xhr_complete", XHR)
    mediator.publish("b")

    record = module.get_current_kpis()
    assert record["timestamp"] == 600_000
    assert record["sample_rate"] == 1.0
    assert parse_local_timestamp(record["local_timestamp"]) == module.start_time
    stream = record["event_stream"]
    assert len(stream) == 3
    assert stream[1][module.REPEAT_COUNT_INDEX] == 2
    assert stream[0] == ["a", 10]


def test_unsampled_session_still_publishes_previous(make_module, mediator, model, network):
    model.set_current(PREVIOUS)
    network.set_context(0.0)

    module = make_module()
    module.start()

    assert network.sent == [[PREVIOUS]]
    assert module.sampling_enabled is False
    assert module.add_event("a") is None
    assert module.get_current_kpis() is None
    assert model.get_current() is None


def test_send_error_is_announced(make_module, mediator, model, network):
    model.set_current(PREVIOUS)
    network.send_result = False
    errors = listen(mediator, Message.SEND_ERROR)
    results = []

    module = make_module()
    module.start()
    module.publish_current(results.append)

    assert errors == ["interaction_data_send_error", "interaction_data_send_error"]
    assert results == [False]
    assert len(network.sent) == 2
    assert model.get_current() is None


def test_events_before_decision_are_promoted(make_module, mediator, model, network, clock):
    network.deferred = True
    module = make_module()
    module.start()

    clock.advance(50)
    mediator.publish("service", {"name": "authenticate"})
    mediator.publish("kpi_data", {"orphaned": True})
    assert model.get_current() is None
    assert module.get_current_event_stream() == [["screen.authenticate", 50]]

    network.deliver_context()

    record = model.get_current()
    assert record["event_stream"] == [["screen.authenticate", 50]]
    assert record["orphaned"] is True
    assert module.get_current_event_stream() == record["event_stream"]


def test_events_before_decision_are_discarded_when_unsampled(make_module, mediator, model, network):
    network.deferred = True
    network.set_context(0.0)
    module = make_module()
    module.start()

    mediator.publish("service", {"name": "authenticate"})
    network.deliver_context()

    assert module.sampling_enabled is False
    assert module.get_current_event_stream() is None
    assert model.get_current() is None


def test_no_stale_data_before_decision(make_module, model, network):
    model.set_current(PREVIOUS)
    network.deferred = True
    module = make_module()
    module.start()

    assert model.get_current() is None
    assert module.get_current_kpis() == {}
    assert module.get_current_event_stream() == []


def test_kpi_data_merges_into_durable_record(make_module, mediator, model):
    module = make_module()
    module.start()

    mediator.publish("kpi_data", {"new_account": True, "number_emails": 2})
    record = module.get_current_kpis()
    assert record["new_account"] is True
    assert record["number_emails"] == 2
    # kpi_data itself is not an event
    assert record["event_stream"] == []


def test_start_time_message_rebases(make_module, mediator, clock):
    module = make_module()
    module.start()
    clock.advance(100)
    mediator.publish("a")
    mediator.publish("start_time", clock.now - 400)

    assert module.start_time == clock.now - 400
    assert module.get_current_event_stream() == [["a", 400]]


def test_forced_sampling_option(make_module, model, network):
    network.set_context(0.0)
    module = make_module()
    module.start(sampling_enabled=True)
    assert module.sampling_enabled is True
    assert model.get_current() is not None


def test_test_hooks(make_module, mediator):
    module = make_module()
    module.start()
    module.set_name_table({"a": "renamed", "b": None})

    mediator.publish("a")
    mediator.publish("b")
    assert [e[0] for e in module.get_current_event_stream()] == ["renamed", "b"]

    module.disable()
    assert module.add_event("a") is None
    module.enable()
    assert module.add_event("a")[0] == "renamed"


def test_stop_unsubscribes(make_module, mediator):
    module = make_module()
    module.start()
    module.stop()
    mediator.publish("a")
    assert module.get_current_event_stream() == []


def make_failing(mediator, network, clock, storage):
    model = InteractionDataModel(storage, network)
    return model, InteractionData(mediator, model, network, clock=clock, rng=lambda: 0.5)


def test_store_down_at_start_disables_collection(mediator, network, clock, failing_storage, caplog):
    errors = listen(mediator, Message.SEND_ERROR)
    _, module = make_failing(mediator, network, clock, failing_storage)

    module.start()

    assert module.sampling_enabled is False
    assert errors == ["interaction_data_send_error"]
    assert module.add_event("a") is None
    assert module.get_current_kpis() is None
    assert "store down" in caplog.text


def test_store_down_on_continuation(mediator, network, clock, failing_storage):
    _, module = make_failing(mediator, network, clock, failing_storage)

    module.start(continuation=True)

    assert module.sampling_enabled is False
    mediator.publish("a")
    assert module.get_current_event_stream() is None


def test_store_failure_mid_session(mediator, network, clock, failing_storage):
    failing_storage.failing = False
    _, module = make_failing(mediator, network, clock, failing_storage)
    module.start()
    assert module.sampling_enabled is True

    failing_storage.failing = True
    mediator.publish("a")
    mediator.publish("kpi_data", {"new_account": True})

    assert module.sampling_enabled is False
    assert module.add_event("b") is None
    assert module.get_current_event_stream() is None


def test_start_time_without_a_value_is_ignored(make_module):
    module = make_module()
    module.start()
    start = module.start_time

    assert module.add_event("start_time") is None
    assert module.add_event("a", {"eventTime": "2024-01-01T00:00:00"}) == ["a", 0]
    assert module.start_time == start
