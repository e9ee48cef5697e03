import copy

from sqlfirewall.utils import parse_config_file, merge_configs


DEFAULT_CONFIGS = {
    'location': 'eastus',
    'resource_group_prefix': 'rgSQLServer',
    'server_name_prefix': 'sqlserver',
    'admin_login_prefix': 'sqladmin',
    'password_length': 16,
    'operation_timeout': None,
    'retry': {
        'attempts': 1,
        'max_wait': 30,
    },
    'firewall_rules': {
        'range': {'start_ip': '10.2.0.1', 'end_ip': '10.2.0.10'},
        'single': {'start_ip': '10.0.0.1', 'end_ip': '10.0.0.1'},
        'new': {'start_ip': '10.10.10.1', 'end_ip': '10.10.10.10'},
        'update': {'start_ip': '121.12.12.1', 'end_ip': '121.12.12.10'},
    },
}


def load_configs(config_file_path=None, configs=None):
    """Build the provisioning configs from the defaults,
    then the config file (if given), then the custom configs (if given)."""
    result = copy.deepcopy(DEFAULT_CONFIGS)
    if config_file_path:
        result = merge_configs(result, parse_config_file(config_file_path))
    if configs:
        if not isinstance(configs, dict):
            raise TypeError('Configs has to be a dictionary.')
        result = merge_configs(result, configs)
    return result


class cloud_provisioning(object):
    """This is a base class of sqlfirewall engine,
        and it can be used to manage resources on different cloud systems."""

    def __init__(self, config_file_path=None, configs=None):
        self.configs = load_configs(config_file_path=config_file_path, configs=configs)

    def provisioning(self):
        """Creating the required resources and checking their state
        """
        pass

    def deprovisioning(self):
        """Deleting every resource created by this provisioner
        """
        pass
