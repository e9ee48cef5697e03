import os

from azure.core.exceptions import ClientAuthenticationError, ServiceRequestError, ServiceResponseError
from azure.identity import ClientSecretCredential
from azure.mgmt.resource.resources import ResourceManagementClient
from azure.mgmt.sql import SqlManagementClient
from azure.mgmt.sql.models import FirewallRule, Server

from sqlfirewall.provisioner.resources import firewall_rule, resource_group_handle, sql_server_handle
from sqlfirewall.utils import AuthenticationError, ProvisioningError, call_with_retry, get_logger

logger = get_logger()


CREDENTIAL_ENV_VARS = ('CLIENT_ID', 'CLIENT_SECRET', 'TENANT_ID', 'SUBSCRIPTION_ID')

# errors raised before the request reached Azure or while reading its response
TRANSIENT_ERRORS = (ServiceRequestError, ServiceResponseError)


def get_credentials_from_env(environ=None):
    '''Read the service principal credentials from the environment variables

    Parameters
    ----------
    environ: dict
        the environment to read from, `os.environ` by default

    Returns
    -------
    dict
        with the keys client_id, client_secret, tenant_id and subscription_id

    Raises
    ------
    AuthenticationError
        if at least one of the variables is missing or empty
    '''
    if environ is None:
        environ = os.environ
    missing = [name for name in CREDENTIAL_ENV_VARS if not environ.get(name, '').strip()]
    if missing:
        raise AuthenticationError('Missing Azure credentials, please set the environment variable(s): %s'
                                  % ', '.join(missing))
    return {name.lower(): environ[name].strip() for name in CREDENTIAL_ENV_VARS}


class azure_sql_provisioner(object):
    """Manage resource groups, SQL servers and their firewall rules on Azure.

    Every long running operation is waited until Azure reports its final state.
    """

    def __init__(self, credentials, **kwargs):
        self.credentials = credentials
        self.retry_attempts = kwargs.get('retry_attempts', 1)
        self.max_wait = kwargs.get('max_wait', 30)
        self.operation_timeout = kwargs.get('operation_timeout')

        self._credential = kwargs.get('credential')
        self._resource_client = kwargs.get('resource_client')
        self._sql_client = kwargs.get('sql_client')

    def _get_credential(self):
        if self._credential is None:
            logger.debug("Creating a credential for the service principal %s" % self.credentials['client_id'])
            self._credential = ClientSecretCredential(tenant_id=self.credentials['tenant_id'],
                                                      client_id=self.credentials['client_id'],
                                                      client_secret=self.credentials['client_secret'])
        return self._credential

    @property
    def resource_client(self):
        if self._resource_client is None:
            logger.info("Creating a client to connect to Azure Resource Manager")
            self._resource_client = ResourceManagementClient(self._get_credential(),
                                                             self.credentials['subscription_id'])
        return self._resource_client

    @property
    def sql_client(self):
        if self._sql_client is None:
            logger.info("Creating a client to connect to Azure SQL")
            self._sql_client = SqlManagementClient(self._get_credential(),
                                                   self.credentials['subscription_id'])
        return self._sql_client

    def _call(self, func):
        try:
            return call_with_retry(func,
                                   attempts=self.retry_attempts,
                                   max_wait=self.max_wait,
                                   retry_on=TRANSIENT_ERRORS)
        except ClientAuthenticationError as e:
            raise AuthenticationError('Azure rejected the credentials of %s: %s'
                                      % (self.credentials['client_id'], e.message)) from e

    def _wait(self, poller, description):
        poller.wait(self.operation_timeout)
        if not poller.done():
            raise ProvisioningError('Timed out after %s seconds while %s' % (self.operation_timeout, description))
        return poller.result()

    @staticmethod
    def _to_rule(sdk_rule):
        return firewall_rule(sdk_rule.name, sdk_rule.start_ip_address, sdk_rule.end_ip_address, id=sdk_rule.id)

    def create_resource_group(self, name, location):
        result = self._call(lambda: self.resource_client.resource_groups.create_or_update(
            name, {'location': location}))
        return resource_group_handle(result.name, result.location, id=result.id)

    def delete_resource_group(self, name):
        self._call(lambda: self._wait(self.resource_client.resource_groups.begin_delete(name),
                                      'deleting resource group %s' % name))

    def list_resource_groups(self, prefix=None):
        """Return the names of the resource groups in the subscription, optionally only those starting with `prefix`"""
        groups = self._call(lambda: list(self.resource_client.resource_groups.list()))
        return [group.name for group in groups if prefix is None or group.name.startswith(prefix)]

    def create_sql_server(self, resource_group, name, administrator_login, administrator_login_password, location):
        parameters = Server(location=location,
                            administrator_login=administrator_login,
                            administrator_login_password=administrator_login_password)
        result = self._call(lambda: self._wait(
            self.sql_client.servers.begin_create_or_update(resource_group, name, parameters),
            'creating SQL server %s' % name))
        return sql_server_handle(result.name, resource_group, result.administrator_login, id=result.id)

    def delete_sql_server(self, resource_group, name):
        self._call(lambda: self._wait(self.sql_client.servers.begin_delete(resource_group, name),
                                      'deleting SQL server %s' % name))

    def create_firewall_rule(self, resource_group, server, rule):
        parameters = FirewallRule(start_ip_address=rule.start_ip, end_ip_address=rule.end_ip)
        result = self._call(lambda: self.sql_client.firewall_rules.create_or_update(
            resource_group, server, rule.name, parameters))
        return self._to_rule(result)

    def list_firewall_rules(self, resource_group, server):
        rules = self._call(lambda: list(self.sql_client.firewall_rules.list_by_server(resource_group, server)))
        return [self._to_rule(rule) for rule in rules]

    def get_firewall_rule(self, resource_group, server, name):
        result = self._call(lambda: self.sql_client.firewall_rules.get(resource_group, server, name))
        return self._to_rule(result)

    def update_firewall_rule(self, resource_group, server, rule):
        # Azure replaces the whole range of an existing rule on create_or_update
        return self.create_firewall_rule(resource_group, server, rule)

    def delete_firewall_rule(self, resource_group, server, name):
        self._call(lambda: self.sql_client.firewall_rules.delete(resource_group, server, name))
