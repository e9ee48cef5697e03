from .provisioning import cloud_provisioning, load_configs, DEFAULT_CONFIGS
from .resources import firewall_rule, resource_group_handle, sql_server_handle
from .azure_provisioner import azure_sql_provisioner, get_credentials_from_env
