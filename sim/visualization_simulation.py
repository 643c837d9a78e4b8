"""
Visualization simulation for the DSN SupportToken.

This script runs the economic model with random platform activity and plots
the history.
"""

import sys
import os

# Add the core directory to the path
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "core"))
from token_economy import SupportTokenEconomy


def run_visualization_simulation():
    economy = SupportTokenEconomy(num_users=25, initial_grant=50_000, seed=7)

    print("Initial ledger state:")
    for key, value in economy.get_system_state().items():
        print(f"  {key}: {value}")

    print("\nRunning simulation with visualizations...")
    results = economy.simulate_activity(30, actions_per_hour=5.0, plot_results=True)

    print("\nSimulation Results:")
    for key, value in results.items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    run_visualization_simulation()
