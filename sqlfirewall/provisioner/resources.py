from sqlfirewall.utils import ip_to_int


class resource_group_handle(object):
    def __init__(self, name, location, id=None):
        self.name = name
        self.location = location
        self.id = id

    def __repr__(self):
        return 'resource_group_handle(name=%r, location=%r)' % (self.name, self.location)


class sql_server_handle(object):
    def __init__(self, name, resource_group, administrator_login, id=None):
        self.name = name
        self.resource_group = resource_group
        self.administrator_login = administrator_login
        self.id = id

    def __repr__(self):
        return 'sql_server_handle(name=%r, resource_group=%r)' % (self.name, self.resource_group)


class firewall_rule(object):
    """A named range of IPv4 addresses allowed to reach a SQL server

    Parameters
    ----------
    name: str
        the name of the rule, unique on its server

    start_ip: str
        the first allowed address, in dotted-quad notation

    end_ip: str
        the last allowed address, it must not be lower than `start_ip`

    id: str
        the Azure resource ID, only known once the rule exists on Azure

    Raises
    ------
    ValueError
        if an address is not a valid IPv4 address or if `start_ip` is greater than `end_ip`
    """

    def __init__(self, name, start_ip, end_ip, id=None):
        if not name:
            raise ValueError('A firewall rule needs a name')
        if ip_to_int(start_ip) > ip_to_int(end_ip):
            raise ValueError('The start IP %s of firewall rule %s is greater than its end IP %s' %
                             (start_ip, name, end_ip))
        self.name = name
        self.start_ip = start_ip
        self.end_ip = end_ip
        self.id = id

    @property
    def is_single_ip(self):
        return self.start_ip == self.end_ip

    def with_range(self, start_ip, end_ip):
        """Return a copy of this rule covering another range of addresses"""
        return firewall_rule(self.name, start_ip, end_ip, id=self.id)

    def __eq__(self, other):
        if not isinstance(other, firewall_rule):
            return NotImplemented
        return (self.name, self.start_ip, self.end_ip) == (other.name, other.start_ip, other.end_ip)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash((self.name, self.start_ip, self.end_ip))

    def __repr__(self):
        return 'firewall_rule(name=%r, start_ip=%r, end_ip=%r)' % (self.name, self.start_ip, self.end_ip)
