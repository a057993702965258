# main.py
"""
Main entry point for the animated portfolio background.

This script orchestrates the whole lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Opens the window and sets up the simulation engine.
4. Runs the frame loop: step the simulation, paint its draw commands.
5. Handles clean shutdown.
"""
import logging
from utils import setup_logging, load_config, get_section
from constants import FPS
import cProfile
import pstats
import io

def main():
    """
    The main function to run the background.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config('config.json')
    except Exception as e:
        print(f"FATAL: Could not load config.json. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Portfolio Background Starting ---")

    sim_params = get_section(config, 'simulation_parameters')
    run_params = get_section(config, 'run_control')
    vis_params = get_section(config, 'visualization')

    from simulation import Simulation
    from visualization import Visualizer

    # The visualizer owns the window, so it is created first. The point
    # set itself is populated lazily on the first frame.
    window_size = vis_params.get('window_size')
    visualizer = Visualizer(tuple(window_size) if window_size else None)
    sim = Simulation(sim_params)

    profiler = cProfile.Profile()

    log_throttle = run_params.get('log_throttle_steps', 300)
    # 0 runs until the window is closed.
    max_steps = run_params.get('max_steps', 0)
    fps = vis_params.get('fps', FPS)

    running = True
    step_num = 0
    dt = None

    profiler.enable()
    while running:
        commands = sim.step(visualizer.viewport, visualizer.cursor_position(), dt)
        step_num += 1

        if not visualizer.draw(commands):
            running = False

        # Hot loops must throttle logs
        if step_num % log_throttle == 0:
            logging.info(f"Frame {step_num}")
            logging.debug(
                f"Frame {step_num} | Points: {sim.points.point_count} | "
                f"Candidate pairs: {len(sim.collisions)} | "
                f"Connections: {len(sim.connections)}"
            )

        if max_steps and step_num >= max_steps:
            logging.info(f"Reached max_steps ({max_steps}). Stopping.")
            running = False

        dt = visualizer.tick(fps)
    profiler.disable()

    visualizer.close()
    logging.info("Frame loop finished.")

    logging.info("--- Performance Profile ---")
    s = io.StringIO()
    # Sort by cumulative time spent in the function
    stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
    stats.print_stats(20)
    logging.info(f"\n{s.getvalue()}")

    logging.info("--- Portfolio Background Shutting Down ---")


if __name__ == "__main__":
    main()
