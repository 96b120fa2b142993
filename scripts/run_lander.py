#!/usr/bin/env python
"""Example: Detumble and repoint the lander in a 100 km lunar orbit.

The simulation (surveyor/) is the truth plant; the flight software (flight/)
only sees sensor packets and returns actuator commands. Ground commands go
through the simulation's command channel exactly as they would from a console.

Timeline:
    0 s   Detumble (initial mode): null the initial body rates on the verniers
          (differential thrust for pitch and yaw, the gimbal for roll)
    30 s  Pointing: align body +Z with the local vertical
    60 s  Manual: hold the fixed roll-offset attitude

Usage:
    uv run python scripts/run_lander.py
    uv run python scripts/run_lander.py --config lander.json --plot
"""

import argparse
import logging
from pathlib import Path

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots
from tqdm import tqdm

from flight import AttitudeTarget, FlightSoftware, GuidanceMode, SetGuidanceMode
from surveyor.config import MaxDuration, SurveyorConfig, default_config
from surveyor.simulation import Simulation, SimulationResult

OUTPUT_DIR = Path(__file__).parent.parent / "outputs"


def plot_run(result: SimulationResult, title: str) -> go.Figure:
    """Body rates, quaternion and altitude of a run."""
    df = result.to_dataframe()
    times = df["time"].to_numpy()

    fig = make_subplots(
        rows=3, cols=1, shared_xaxes=True,
        subplot_titles=("Body Rates", "Attitude Quaternion", "Orbit Radius"),
    )
    for name, color in (("wx", "red"), ("wy", "green"), ("wz", "cyan")):
        fig.add_trace(go.Scatter(
            x=times, y=np.degrees(df[name].to_numpy()), name=f"{name} (deg/s)",
            line=dict(color=color)
        ), row=1, col=1)
    for name in ("q0", "q1", "q2", "q3"):
        fig.add_trace(go.Scatter(x=times, y=df[name].to_numpy(), name=name), row=2, col=1)
    fig.add_trace(go.Scatter(
        x=times, y=df["radius"].to_numpy() / 1000, name="Radius (km)",
        line=dict(color="yellow")
    ), row=3, col=1)

    fig.update_layout(title=dict(text=title, x=0.5), height=900, template="plotly_dark")
    fig.update_xaxes(title_text="Time (s)", row=3, col=1)
    return fig


def run_lander(config: SurveyorConfig) -> SimulationResult:
    fsw = FlightSoftware.from_config(config)
    sim = Simulation(config, fsw)

    pointing_tick = int(round(30.0 / sim.dt))
    manual_tick = int(round(60.0 / sim.dt))

    durations = [c.seconds for c in config.simulation.stopping_conditions if isinstance(c, MaxDuration)]
    total = int(round((max(durations) if durations else 100.0) / sim.dt))
    for tick in tqdm(range(total), desc="Simulating"):
        if tick == pointing_tick:
            radial = sim.state.position / np.linalg.norm(sim.state.position)
            target = AttitudeTarget.align(np.array([0.0, 0.0, 1.0]), radial)
            sim.send(SetGuidanceMode(GuidanceMode.POINTING, target))
        elif tick == manual_tick:
            sim.send(SetGuidanceMode(GuidanceMode.MANUAL))

        if not sim.tick():
            break

    snapshot = sim.snapshot()
    print("\n" + "-" * 60)
    print("FINAL STATE")
    print("-" * 60)
    print(f"  Time: {snapshot.time:.2f} s ({snapshot.epoch.isoformat()})")
    print(f"  Guidance mode: {snapshot.guidance_mode}")
    print(f"  Body rates: {np.degrees(snapshot.omega_b)} deg/s")
    propulsion = sim.spacecraft.propulsion
    if propulsion is not None:
        print(f"  Engine thrusts: {propulsion.thrusts()} N")
        print(f"  Gimbal angles: {np.degrees(propulsion.gimbal_angles())} deg")
    for body in sim.universe.bodies:
        print(f"  Altitude above {body.name}: {sim.universe.altitude(body.name, snapshot.position) / 1000:.2f} km")
    print(f"  Stop reason: {snapshot.stop_reason}")
    return sim.result()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--config", type=Path, help="JSON configuration (default: built-in lander)")
    parser.add_argument("--plot", action="store_true", help="Write an HTML dashboard of the run")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("SURVEYOR LANDER ATTITUDE SIMULATION")
    print("=" * 60)

    config = SurveyorConfig.from_file(args.config) if args.config else default_config()
    result = run_lander(config)

    OUTPUT_DIR.mkdir(exist_ok=True)
    path = result.write_parquet(OUTPUT_DIR / "lander_run.parquet")
    print(f"\nHistory written to {path}")

    if args.plot:
        html = OUTPUT_DIR / "lander_run.html"
        plot_run(result, "Surveyor Attitude Control").write_html(str(html))
        print(f"Dashboard written to {html}")


if __name__ == "__main__":
    main()
