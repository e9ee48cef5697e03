import os
import yaml
import string
import secrets
import logging
import ipaddress

import tenacity


logger_singleton = list()


def get_logger(log_level=logging.INFO):
    '''Create a custom logger

    Parameters
    ----------
    log_level: int
        the level of log from `logging` module

    Returns
    -------
    Logger
        a custom Logger object with custom format and logging level
    '''
    global logger_singleton
    if len(logger_singleton) > 0:
        logger = logger_singleton[0]
    else:
        logger = logging.getLogger(__name__)
        log_format = "%(asctime)s [%(threadName)s] %(levelname)s: %(message)s"
        handler = logging.StreamHandler()
        formatter = logging.Formatter(log_format)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(log_level)
        logger_singleton.append(logger)

        try:
            import coloredlogs
            coloredlogs.install(logger=logger, fmt=log_format, level=log_level)
        except Exception as e:
            logger.error('Exception: %s' % e, exc_info=True)
    return logger


logger = get_logger()


def parse_config_file(config_file_path):
    if config_file_path is None or config_file_path == "":
        raise IOError("Please enter the configuration file path.")
    elif not os.path.exists(config_file_path):
        raise IOError("Please enter an existing configuration file path.")
    else:
        with open(config_file_path, 'r') as f:
            content = yaml.full_load(f)
            if content is None:
                return dict()
            if not isinstance(content, dict):
                raise IOError("Please enter a configuration file containing a mapping of settings.")
            return {key: str(value) if isinstance(value, str) else value for key, value in content.items()}


def merge_configs(base, override):
    """Return a copy of `base` updated by `override`, merging nested dicts key by key."""
    result = dict(base)
    for key, value in (override or dict()).items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result


class WorkflowError(Exception):
    def __init__(self, message, step=None):
        self.message = message
        self.step = step
        super(WorkflowError, self).__init__(message)


class AuthenticationError(WorkflowError):
    pass


class ProvisioningError(WorkflowError):
    pass


class VerificationError(ProvisioningError):
    pass


class CleanupError(WorkflowError):
    pass


def is_ip(ip):
    """Check whether the given string is a dotted-quad IPv4 address"""
    try:
        ipaddress.IPv4Address(ip)
    except (ipaddress.AddressValueError, ValueError):
        return False
    return True


def ip_to_int(ip):
    """Convert a dotted-quad IPv4 address into its 32-bit integer value

    Raises
    ------
    ValueError
        if `ip` is not a valid IPv4 address
    """
    if not is_ip(ip):
        raise ValueError('%r is not a valid IPv4 address' % ip)
    return int(ipaddress.IPv4Address(ip))


def create_random_name(prefix, max_length=30):
    '''Generate a name that is unlikely to collide with the names of previous runs

    Parameters
    ----------
    prefix: str
        the fixed beginning of the name

    max_length: int
        the maximum length of the returned name, the random suffix is at least 5 characters

    Returns
    -------
    str
        `prefix` followed by lowercase hexadecimal characters
    '''
    if len(prefix) + 5 > max_length:
        raise ValueError('The prefix "%s" is too long for a name of %s characters' % (prefix, max_length))
    suffix = secrets.token_hex(max_length)
    return ('%s%s' % (prefix, suffix))[:max_length]


PASSWORD_SYMBOLS = '!@#$%^*()-_=+'


def create_password(length=16):
    """Generate a password containing lowercase, uppercase, digit and symbol characters"""
    if length < 8:
        raise ValueError('Password length must be at least 8 characters')
    classes = [string.ascii_lowercase, string.ascii_uppercase, string.digits, PASSWORD_SYMBOLS]
    chars = [secrets.choice(each) for each in classes]
    alphabet = ''.join(classes)
    chars += [secrets.choice(alphabet) for _ in range(length - len(chars))]
    secrets.SystemRandom().shuffle(chars)
    return ''.join(chars)


def _log_retry(retry_state):
    logger.warning('Attempt #%s failed with: %s. Retrying' % (retry_state.attempt_number,
                                                              retry_state.outcome.exception()))


def call_with_retry(func, attempts=1, max_wait=30, retry_on=(Exception,)):
    """Call `func` and retry it when it raises one of the `retry_on` exceptions

    Parameters
    ----------
    func: callable
        a function without arguments

    attempts: int
        the maximum number of calls, 1 means that `func` is called exactly once

    max_wait: int
        the upper bound in seconds of the random exponential wait between two attempts

    retry_on: tuple of Exception
        the exception types that are considered as transient

    Returns
    -------
        the return value of `func`, the last exception is raised if every attempt fails
    """
    retryer = tenacity.Retrying(
        reraise=True,
        stop=tenacity.stop_after_attempt(max(1, int(attempts))),
        wait=tenacity.wait_random_exponential(multiplier=1, max=max_wait),
        retry=tenacity.retry_if_exception_type(retry_on),
        before_sleep=_log_retry
    )
    return retryer(func)
