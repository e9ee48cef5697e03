from .firewall_workflow import (
    firewall_rules_workflow,
    STEPS,
    INIT,
    CLEANUP,
    DONE,
    FAILED)
