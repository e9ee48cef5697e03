import re
import sys
from argparse import ArgumentParser

from sqlfirewall.utils import WorkflowError, get_logger
from sqlfirewall.provisioner import azure_sql_provisioner, get_credentials_from_env

logger = get_logger()

# letters, digits, underscores, hyphens, periods and parentheses, not ending with a period
RESOURCE_GROUP_NAME = re.compile(r'^[\w\-\.\(\)]{0,89}[\w\-\(\)]$')


def parse_resource_group_names(names):
    """Split a comma separated list of resource group names and check each of them"""
    message = 'Please give the right format of resource group names <name>,<name>...'
    if names is None:
        raise ValueError(message)
    result = [name.strip() for name in names.split(',') if name.strip()]
    if len(result) == 0:
        raise ValueError(message)
    for name in result:
        if not RESOURCE_GROUP_NAME.match(name):
            raise ValueError(message)
    return result


def delete_resource_groups(provisioner, names):
    """Delete the given resource groups, a failure does not stop the deletion of the next ones

    Returns
    -------
    list of str, list of str
        the deleted resource groups and the ones that could not be deleted
    """
    deleted = list()
    failed = list()
    for name in names:
        try:
            logger.info('Deleting resource group %s' % name)
            provisioner.delete_resource_group(name)
            deleted.append(name)
        except Exception as e:
            logger.error('Cannot delete resource group %s: %s' % (name, e))
            failed.append(name)
    logger.info('Deleted %s resource group(s)' % len(deleted))
    return deleted, failed


def main():
    parser = ArgumentParser(prog='delete_resource_groups')
    parser.add_argument("--resource_groups", dest="resource_groups",
                        help="the comma separated list of resource group names to delete",
                        default=None,
                        type=str)
    parser.add_argument("--prefix", dest="prefix",
                        help="delete every resource group whose name starts with this prefix (e.g. rgSQLServer)",
                        default=None,
                        type=str)
    args = parser.parse_args()
    if not args.resource_groups and not args.prefix:
        parser.error('Please provide --resource_groups or --prefix')

    try:
        provisioner = azure_sql_provisioner(get_credentials_from_env())
        if args.resource_groups:
            names = parse_resource_group_names(args.resource_groups)
        else:
            names = provisioner.list_resource_groups(prefix=args.prefix)
    except (WorkflowError, ValueError) as e:
        logger.error(e)
        return 1

    if len(names) == 0:
        logger.info('No resource group to delete')
        return 0
    logger.info('We found %s resource groups: \n' % len(names))
    for name in names:
        print(name)

    decision = input('Do you want to delete all resource groups [y/n]? ')
    if decision.lower().strip() != 'y':
        logger.info('Bye bye!')
        return 0
    _, failed = delete_resource_groups(provisioner, names)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
