from execo_engine import Engine


class performing_actions(Engine):
    """This is a base class of sqlfirewall engine, that is built from execo_engine
    and can be used to manage resources on a cloud system."""

    def __init__(self):
        super(performing_actions, self).__init__()

        self.args_parser.add_argument("--system_config_file",
                                      dest="config_file_path",
                                      help="the path to the provisioning configuration file.",
                                      default=None,
                                      type=str)


class performing_actions_azure(performing_actions):
    def __init__(self):
        """ Add options and initialize the engine
        """
        super(performing_actions_azure, self).__init__()

        self.args_parser.add_argument("--location", dest="location",
                                      help="the Azure region where the resources are created (e.g. eastus).",
                                      default=None,
                                      type=str)

        self.args_parser.add_argument("--retry_attempts", dest="retry_attempts",
                                      help="the maximum number of attempts of a remote call failing with a transient error.",
                                      default=None,
                                      type=int)

        self.args_parser.add_argument("--operation_timeout", dest="operation_timeout",
                                      help="the maximum number of seconds to wait for a long running operation.",
                                      default=None,
                                      type=float)

    def get_custom_configs(self):
        """Return the configs given as command line options, to override the configuration file"""
        configs = dict()
        if self.args.location:
            configs['location'] = self.args.location
        if self.args.retry_attempts is not None:
            if self.args.retry_attempts < 1:
                raise ValueError('The number of retry attempts has to be at least 1.')
            configs['retry'] = {'attempts': self.args.retry_attempts}
        if self.args.operation_timeout is not None:
            configs['operation_timeout'] = self.args.operation_timeout
        return configs
