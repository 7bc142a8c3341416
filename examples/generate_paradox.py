from simpson_synth import AnnealingConfig, blocks_backdoor, default_problem, generate_paradox_dataset

def main():
    problem = default_problem(n_rows=1000, noise_scale=0.1)
    cfg = AnnealingConfig(iterations=2000, n_proposals=2, seed=0, log_every=200)
    ds, result = generate_paradox_dataset(problem, cfg, out_dir="runs/example")

    print("trajectory:", result.final_trajectory.round(3))
    print("target:    ", problem.target)
    print("signs match:", result.signs_match)
    for covs in problem.covariate_sets:
        print(f"  adjust for {covs}: backdoor blocked = {blocks_backdoor(problem.graph, 'X', 'Y', covs)}")

if __name__ == "__main__":
    main()
