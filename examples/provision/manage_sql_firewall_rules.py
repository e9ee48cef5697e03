import signal
import sys
import traceback

from sqlfirewall.utils import WorkflowError, get_logger
from sqlfirewall.action import performing_actions_azure
from sqlfirewall.provisioner import azure_sql_provisioner, get_credentials_from_env, load_configs
from sqlfirewall.workflow import firewall_rules_workflow

logger = get_logger()


def _raise_keyboard_interrupt(signum, frame):
    raise KeyboardInterrupt('Received signal %s' % signum)


class manage_sql_firewall_rules(performing_actions_azure):
    """Create a SQL server with 2 firewall rules, list, get, update and delete rules,
    then delete the SQL server and its resource group."""

    def __init__(self):
        super(manage_sql_firewall_rules, self).__init__()

    def run_workflow(self, credentials):
        configs = load_configs(config_file_path=self.args.config_file_path,
                               configs=self.get_custom_configs())
        logger.debug("Init provisioner: azure_sql_provisioner")
        provisioner = azure_sql_provisioner(credentials,
                                            retry_attempts=configs['retry']['attempts'],
                                            max_wait=configs['retry']['max_wait'],
                                            operation_timeout=configs['operation_timeout'])
        workflow = firewall_rules_workflow(provisioner, configs=configs)
        workflow.run()
        logger.info('Workflow finished with state: %s' % workflow.state)

    def run(self):
        logger.debug("Reading the Azure credentials from the environment variables")
        credentials = get_credentials_from_env()
        self.run_workflow(credentials)


def main(argv=None):
    previous_handler = signal.signal(signal.SIGTERM, _raise_keyboard_interrupt)
    logger.info("Init engine in %s" % __file__)
    engine = manage_sql_firewall_rules()
    try:
        logger.info("Start engine in %s" % __file__)
        engine.start(argv)
    except WorkflowError as e:
        logger.error('Program is terminated by the following error: %s' % e, exc_info=True)
        return 1
    except KeyboardInterrupt:
        logger.info('Program is terminated by keyboard interrupt.')
        return 1
    except Exception as e:
        logger.error(
            'Program is terminated by the following exception: %s' % e, exc_info=True)
        traceback.print_exc()
        return 1
    finally:
        signal.signal(signal.SIGTERM, previous_handler)
    return 0


if __name__ == "__main__":
    sys.exit(main())
