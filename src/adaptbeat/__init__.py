"""adaptbeat - Adaptive heartbeat scheduling for autonomous agents.

Modules:
    - heartbeat: state model, interest assessment, scheduling, persistence
    - context_engine: workspace memory documents for agent prompts
    - identity: canonical agent keys for state isolation
    - config: ~/.adaptbeat/config.yaml settings
    - cli: `adaptbeat` command line
"""

__version__ = "0.3.0"
