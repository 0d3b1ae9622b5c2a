from dtulink.parser import CommandStatus, Parser


def test_last_update_defaults_to_zero_and_is_settable():
    parser = Parser()
    assert parser.last_update == 0
    parser.last_update = 1234
    assert parser.last_update == 1234


def test_instances_do_not_share_state():
    a = Parser()
    b = Parser()
    a.last_update = 5
    assert b.last_update == 0


def test_command_status_lookup_by_value():
    assert CommandStatus(1) is CommandStatus.NOK
    assert [s.name for s in CommandStatus] == ["OK", "NOK", "PENDING"]