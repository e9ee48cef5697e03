from sqlfirewall.provisioner.provisioning import cloud_provisioning
from sqlfirewall.provisioner.resources import firewall_rule
from sqlfirewall.utils import (CleanupError,
                               ProvisioningError,
                               VerificationError,
                               WorkflowError,
                               create_password,
                               create_random_name,
                               get_logger)

logger = get_logger()


INIT = 'Init'
GROUP_CREATED = 'GroupCreated'
SERVER_CREATED = 'ServerCreated'
RULES_SEEDED = 'RulesSeeded'
RULES_RESET = 'RulesReset'
RULE_ADDED = 'RuleAdded'
RULE_VERIFIED = 'RuleVerified'
RULE_UPDATED = 'RuleUpdated'
SERVER_DELETED = 'ServerDeleted'
CLEANUP = 'Cleanup'
DONE = 'Done'
FAILED = 'Failed'

STEPS = (GROUP_CREATED, SERVER_CREATED, RULES_SEEDED, RULES_RESET,
         RULE_ADDED, RULE_VERIFIED, RULE_UPDATED, SERVER_DELETED)


class firewall_rules_workflow(cloud_provisioning):
    """Provision a SQL server with firewall rules, exercise the rules and remove everything.

    The resource client is injected, it has to provide the operations of
    `sqlfirewall.provisioner.azure_sql_provisioner`. Every created resource
    lives in one resource group which is deleted at the end of `run`,
    whether the provisioning succeeded or not.
    """

    def __init__(self, client, **kwargs):
        super(firewall_rules_workflow, self).__init__(config_file_path=kwargs.get('config_file_path'),
                                                      configs=kwargs.get('configs'))
        self.client = client
        self.state = INIT
        self.completed_states = [INIT]

        self.resource_group = None
        self.server = None
        self.rule = None
        self.cleanup_error = None

    def _set_state(self, state):
        logger.debug('Workflow state: %s -> %s' % (self.state, state))
        self.state = state
        self.completed_states.append(state)

    def _step(self, step, func, advance=True):
        """Run one step, any failure is reported as a ProvisioningError of this step"""
        try:
            result = func()
        except WorkflowError as e:
            if e.step is None:
                e.step = step
            raise
        except Exception as e:
            raise ProvisioningError('Failed at step %s: %s' % (step, e), step=step) from e
        if advance:
            self._set_state(step)
        return result

    def _rule_from_configs(self, key, name):
        rule_configs = self.configs['firewall_rules'][key]
        return firewall_rule(name, rule_configs['start_ip'], rule_configs['end_ip'])

    def create_resource_group(self):
        name = create_random_name(self.configs['resource_group_prefix'])
        logger.info("Creating resource group...")
        self.resource_group = self.client.create_resource_group(name, self.configs['location'])
        logger.info("Created a resource group with name: %s" % self.resource_group.name)

    def create_sql_server(self):
        logger.info("Create a SQL server with 2 firewall rules adding a single IP Address and a range of IP Addresses")
        name = create_random_name(self.configs['server_name_prefix'])
        logger.info("Creating SQL Server...")
        self.server = self.client.create_sql_server(
            self.resource_group.name,
            name,
            administrator_login='%s%s' % (self.configs['admin_login_prefix'], name),
            administrator_login_password=create_password(self.configs['password_length']),
            location=self.configs['location'])
        logger.info("Created a SQL Server with name: %s" % self.server.name)

    def seed_firewall_rules(self):
        range_rule = self._rule_from_configs('range', create_random_name('rangefirewallrule-'))
        if range_rule.is_single_ip:
            raise ValueError('The range firewall rule must cover more than one address')
        single_rule = self._rule_from_configs('single', create_random_name('singlefirewallrule-'))
        if not single_rule.is_single_ip:
            raise ValueError('The single IP firewall rule must have the same start and end IP')

        logger.info("Creating 2 firewall rules...")
        created = self.client.create_firewall_rule(self.resource_group.name, self.server.name, range_rule)
        logger.info("Created range ip firewall rule with name %s" % created.name)
        created = self.client.create_firewall_rule(self.resource_group.name, self.server.name, single_rule)
        logger.info("Created single ip firewall rule with name %s" % created.name)

    def reset_firewall_rules(self):
        logger.info("Listing all firewall rules in SQL Server.")
        rules = self.client.list_firewall_rules(self.resource_group.name, self.server.name)
        for rule in rules:
            logger.info("Deleting a firewall rule with name: %s" % rule.name)
            self.client.delete_firewall_rule(self.resource_group.name, self.server.name, rule.name)
        logger.info("Deleted %s firewall rule(s)" % len(rules))

    def add_firewall_rule(self):
        logger.info("Creating a firewall rule in existing SQL Server")
        rule = self._rule_from_configs('new', create_random_name('newfirewallrule'))
        if rule.is_single_ip:
            raise ValueError('The new firewall rule must cover more than one address')
        self.rule = self.client.create_firewall_rule(self.resource_group.name, self.server.name, rule)
        logger.info("Created a new firewall rule for SQL Server with name: %s" % self.rule.name)

    def verify_firewall_rule(self):
        logger.info("Get a particular firewall rule in SQL Server")
        fetched = self.client.get_firewall_rule(self.resource_group.name, self.server.name, self.rule.name)
        logger.info("Get result with id: %s and name %s" % (fetched.id, fetched.name))
        if fetched.name != self.rule.name:
            raise VerificationError('Fetched firewall rule %s instead of %s' % (fetched.name, self.rule.name))
        if self.rule.id is not None and fetched.id != self.rule.id:
            raise VerificationError('Fetched firewall rule has id %s instead of %s' % (fetched.id, self.rule.id))

    def update_firewall_rule(self):
        update_configs = self.configs['firewall_rules']['update']
        requested = self.rule.with_range(update_configs['start_ip'], update_configs['end_ip'])
        if requested.is_single_ip:
            raise ValueError('The updated firewall rule must cover more than one address')
        logger.info("Updating the firewall rule %s to the range %s - %s" %
                    (requested.name, requested.start_ip, requested.end_ip))
        updated = self.client.update_firewall_rule(self.resource_group.name, self.server.name, requested)
        logger.info("Updated a firewall rule parameter StartIPAddress: %s and EndIPAddress: %s" %
                    (updated.start_ip, updated.end_ip))
        if updated != requested:
            raise VerificationError('Updated firewall rule is %r, expected %r' % (updated, requested))
        self.rule = updated

    def check_firewall_rules(self):
        rules = self.client.list_firewall_rules(self.resource_group.name, self.server.name)
        for rule in rules:
            logger.info("Print information of the fire wall rule with id: %s and name: %s" % (rule.id, rule.name))
        if len(rules) != 1:
            raise VerificationError('Expected exactly 1 firewall rule, found %s' % len(rules))
        if rules[0] != self.rule:
            raise VerificationError('Listed firewall rule is %r, expected %r' % (rules[0], self.rule))

    def delete_sql_server(self):
        logger.info("Deleting a Sql Server...")
        self.client.delete_sql_server(self.resource_group.name, self.server.name)
        logger.info("Deleted SQL Server: %s" % self.server.name)

    def provisioning(self):
        self._step(GROUP_CREATED, self.create_resource_group)
        self._step(SERVER_CREATED, self.create_sql_server)
        self._step(RULES_SEEDED, self.seed_firewall_rules)
        self._step(RULES_RESET, self.reset_firewall_rules)
        self._step(RULE_ADDED, self.add_firewall_rule)
        self._step(RULE_VERIFIED, self.verify_firewall_rule)
        self._step(RULE_UPDATED, self.update_firewall_rule)
        self._step(SERVER_DELETED, self.check_firewall_rules, advance=False)
        self._step(SERVER_DELETED, self.delete_sql_server)

    def deprovisioning(self):
        """Delete the resource group if it was created. Errors are logged, never raised."""
        self._set_state(CLEANUP)
        if self.resource_group is None:
            logger.info("No resource group was created, nothing to clean up")
            return
        try:
            logger.info("Deleting Resource Group...")
            self.client.delete_resource_group(self.resource_group.name)
            logger.info("Deleted Resource Group: %s" % self.resource_group.name)
        except Exception as e:
            self.cleanup_error = CleanupError('Failed to delete resource group %s: %s' % (self.resource_group.name, e),
                                              step=CLEANUP)
            self.cleanup_error.__cause__ = e
            logger.error(self.cleanup_error.message, exc_info=True)

    def run(self):
        """Run every step then the cleanup.

        Raises
        ------
        WorkflowError
            the first error met during the provisioning, never an error of the cleanup
        """
        is_ok = False
        try:
            self.provisioning()
            is_ok = True
        finally:
            self.deprovisioning()
            self._set_state(DONE if is_ok else FAILED)
