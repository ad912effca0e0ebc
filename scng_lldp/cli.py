#!/usr/bin/env python3
"""
SCNG LLDP - Command Line Interface.

Query one or more agents for their LLDP local system data and remote
table, and print one neighbor table per agent.

Usage:
    # Single agent, SNMPv2c
    python -m scng_lldp 192.168.1.1 -c public

    # Several agents, all requests in flight at once
    python -m scng_lldp -B switch01 switch02 switch03

    # Agents from stdin, JSON to a file
    python -m scng_lldp -i --json -o lldp.json < agents.txt

    # Settings and agents from YAML
    python -m scng_lldp --yaml lldp.yaml
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .client import LldpClient
from .config import SessionConfig, get_community_from_env, load_yaml_config
from .errors import ConfigError
from .models import InitState, agent_to_dict, agents_to_json
from .snmp.session import PysnmpSession, Session, SnmpDispatcher


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ALL_FAILED = 1
EXIT_USAGE = 2


def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='scng-lldp',
        description='Get the LLDP information from switches supporting the LLDP-MIB',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  scng-lldp 192.168.1.1 -c public
  scng-lldp -B -v 1 switch01 switch02
  scng-lldp -i --json < agents.txt
  scng-lldp --yaml lldp.yaml -o lldp.txt

The community can also be set with the SCNG_SNMP_COMMUNITY environment variable.
        """
    )
    parser.add_argument('agents', nargs='*', help='Agent hostnames or IP addresses')
    parser.add_argument(
        '-c', '--community',
        help='SNMP community string (default: public)'
    )
    parser.add_argument(
        '-v', '--snmp-version',
        dest='snmp_version',
        help='SNMP version: 1, 2c or 3 (default: 2c)'
    )
    parser.add_argument(
        '-t', '--timeout',
        type=float,
        help='SNMP timeout in seconds (default: 5)'
    )
    parser.add_argument(
        '-r', '--retries',
        type=int,
        help='SNMP retries (default: 0)'
    )
    parser.add_argument(
        '-i', '--stdin',
        action='store_true',
        help='Read agents from stdin, one agent per line'
    )
    parser.add_argument(
        '-B', '--nonblocking',
        action='store_true',
        help='Deferred mode: query all agents concurrently'
    )
    parser.add_argument(
        '-d', '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument('--yaml', type=Path, help='YAML config file')
    parser.add_argument('--json', action='store_true', help='Output JSON instead of tables')
    parser.add_argument('-o', '--output', type=Path, help='Write output to file')
    return parser


def build_config(args: argparse.Namespace, stdin=None) -> Tuple[SessionConfig, List[str]]:
    """
    Merge YAML, environment and command-line settings.

    Precedence, lowest first: defaults, YAML file, SCNG_SNMP_COMMUNITY,
    command-line options. Agents from all sources are combined.

    Raises:
        ConfigError: invalid settings or no agents
    """
    config = SessionConfig()
    agents: List[str] = []

    if args.yaml:
        config, agents = load_yaml_config(args.yaml)

    env_community = get_community_from_env()
    if env_community:
        config.community = env_community

    if args.community is not None:
        config.community = args.community
    if args.snmp_version is not None:
        config.version = args.snmp_version
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.retries is not None:
        config.retries = args.retries
    if args.nonblocking:
        config.nonblocking = True

    agents.extend(args.agents)
    if args.stdin:
        stream = stdin if stdin is not None else sys.stdin
        agents.extend(line.strip() for line in stream)

    agents = sorted({a for a in agents if a})
    if not agents:
        raise ConfigError("missing agents")

    return config.validate(), agents


def create_session(hostname: str, config: SessionConfig, dispatcher: SnmpDispatcher) -> Session:
    return PysnmpSession(hostname, config, dispatcher=dispatcher)


def run_agents(
    agents: Sequence[str],
    config: SessionConfig,
    dispatcher: SnmpDispatcher,
) -> List[LldpClient]:
    """
    Initialize one client per agent.

    In deferred mode every agent's requests are queued first and the
    dispatcher then runs them all at once.
    """
    clients = []
    for agent in agents:
        session = create_session(agent, config, dispatcher)
        client = LldpClient.attach(session, max_repetitions=config.max_repetitions)
        client.initialize()
        clients.append(client)

    if config.nonblocking:
        dispatcher.run()

    for client in clients:
        if client.state is not InitState.READY:
            logger.warning("%s: %s", client.hostname, client.session.error or client.state.value)

    return clients


def format_agent(client: LldpClient) -> str:
    """Render one agent's remote table as text."""
    local = client.get_local_system_data()
    lines = [
        '',
        f"Hostname: {client.hostname:<15.15} ChassisID: {local.chassis_id or '':<17.17}",
        '-' * 71,
        f"{'LPort':>5} {'RemSysName':>13} {'RemPortId':>25} {'RemChassisId':>25}",
        '-' * 71,
    ]
    for row in client.iter_remote_neighbors():
        lines.append(
            f"{row.local_port:>3d} {row.sys_name or '':>15.15} "
            f"{row.port_id or '':>25.25} {row.chassis_id or '':>25.25}"
        )
    return '\n'.join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.debug)

    try:
        config, agents = build_config(args)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_USAGE

    logger.debug("Session config: %s", config.to_dict())

    dispatcher = SnmpDispatcher()
    clients: List[LldpClient] = []
    try:
        clients = run_agents(agents, config, dispatcher)
    finally:
        for client in clients:
            client.session.close()
        dispatcher.close()

    ready = sorted(
        (c for c in clients if c.state is InitState.READY),
        key=lambda c: c.hostname,
    )

    if args.json:
        output = agents_to_json([
            agent_to_dict(c.hostname, c.get_local_system_data(), c.get_remote_table())
            for c in ready
        ])
    else:
        output = '\n'.join(format_agent(c) for c in ready)

    if args.output:
        with open(args.output, 'w') as f:
            f.write(output + '\n')
        print(f"Saved to: {args.output}")
    elif output:
        print(output)

    return EXIT_OK if ready else EXIT_ALL_FAILED


if __name__ == '__main__':
    sys.exit(main())
