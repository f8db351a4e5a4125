"""Entry point: CLI argument parsing + simulation controller + uvicorn startup."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from src.config import load_config
from src.controller import SimulationController
from src.web.app import create_app


def setup_logging(log_dir: str, verbose: bool = False, level: str = "INFO") -> None:
    """Configure logging to both console and file."""
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=log_level,
        format=fmt,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_path / "maritime_sim.log"),
        ],
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Maritime Anomaly Simulation dashboard backend"
    )
    parser.add_argument(
        "-c", "--config",
        default="config/default.yaml",
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Web server host (overrides config)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Web server port (overrides config)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for a replayable scenario (overrides config)",
    )
    parser.add_argument(
        "--autostart",
        action="store_true",
        help="Start the simulation as soon as the server is up",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def main() -> None:
    args = parse_args()

    # Load configuration
    config = load_config(args.config)

    # Apply CLI overrides
    if args.host:
        config.web.host = args.host
    if args.port:
        config.web.port = args.port
    if args.seed is not None:
        config.simulation.seed = args.seed

    # Setup logging
    setup_logging(config.logging.log_dir, args.verbose, config.logging.level)
    logger = logging.getLogger(__name__)
    logger.info("Starting Maritime Anomaly Simulation")
    logger.info("Scenario: %d vessels, %.0fs at %.1fs ticks, seed=%s",
                config.simulation.vessel_count, config.simulation.duration,
                config.simulation.tick_interval, config.simulation.seed)
    logger.info("Web dashboard: http://%s:%d", config.web.host, config.web.port)

    # Create controller with an initial scenario, then the web app
    controller = SimulationController(config)
    controller.generate_new_scenario()
    app = create_app(controller, autostart=args.autostart)

    try:
        # Run uvicorn (blocks until shutdown)
        uvicorn.run(
            app,
            host=config.web.host,
            port=config.web.port,
            log_level="info",
        )
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        controller.shutdown()
        logger.info("Shutdown complete")


if __name__ == "__main__":
    main()
