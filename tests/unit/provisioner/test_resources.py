import pytest

from sqlfirewall.provisioner import firewall_rule


def test_single_ip_rule():
    rule = firewall_rule('single', '10.0.0.1', '10.0.0.1')
    assert rule.is_single_ip


def test_range_rule():
    rule = firewall_rule('range', '10.2.0.1', '10.2.0.10')
    assert not rule.is_single_ip


@pytest.mark.parametrize('start_ip, end_ip', [
    ('10.2.0.10', '10.2.0.1'),
    ('10.2.0.10', '10.2.0.9'),
    ('121.12.12.1', '12.12.12.1'),
])
def test_start_greater_than_end_is_rejected(start_ip, end_ip):
    with pytest.raises(ValueError) as exc_info:
        firewall_rule('rule', start_ip, end_ip)
    assert 'is greater than its end IP' in str(exc_info)


@pytest.mark.parametrize('start_ip, end_ip', [
    ('10.2.0', '10.2.0.10'),
    ('10.2.0.1', 'abc'),
    ('', ''),
])
def test_malformed_address_is_rejected(start_ip, end_ip):
    with pytest.raises(ValueError):
        firewall_rule('rule', start_ip, end_ip)


def test_rule_needs_a_name():
    with pytest.raises(ValueError):
        firewall_rule('', '10.0.0.1', '10.0.0.1')


def test_with_range_keeps_name_and_id():
    rule = firewall_rule('rule', '10.10.10.1', '10.10.10.10', id='/rules/rule')
    updated = rule.with_range('121.12.12.1', '121.12.12.10')
    assert updated.name == 'rule'
    assert updated.id == '/rules/rule'
    assert (updated.start_ip, updated.end_ip) == ('121.12.12.1', '121.12.12.10')
    assert (rule.start_ip, rule.end_ip) == ('10.10.10.1', '10.10.10.10')
    assert updated != rule


def test_equality_ignores_id():
    assert firewall_rule('rule', '10.0.0.1', '10.0.0.2', id='a') == firewall_rule('rule', '10.0.0.1', '10.0.0.2')
