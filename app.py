# 5. app.py

import logging
import os

from cluster import cluster_by_group, inertia_table, kmeans, silhouette, summarize_clusters
from config import AnalysisConfig
from generate_data import generate_portfolio, save_portfolio
from load_data import clean_data, describe_portfolio, load_data
from preprocess import scaling_table, z_scale
from visualize import plot_cluster_grid, plot_portfolio

logger = logging.getLogger(__name__)


def run_analysis(config=None):
    config = config or AnalysisConfig()

    def out(name):
        return os.path.join(config.output_dir, name)

    os.makedirs(config.output_dir, exist_ok=True)
    kwargs = config.kmeans_kwargs()
    features = config.features

    if not os.path.exists(config.data_path):
        logger.info(f"No portfolio at {config.data_path}, generating one")
        portfolio = generate_portfolio(count_per_group=config.count_per_group, seed=config.seed)
        save_portfolio(portfolio, config.data_path)

    raw_data = load_data(config.data_path)
    logger.info(f"Portfolio summary:\n{describe_portfolio(raw_data).to_string()}")
    clean, n_removed = clean_data(raw_data)

    plot_portfolio(clean, save_path=out("portfolio.png"))
    plot_portfolio(clean, by='sex', facet=True, save_path=out("portfolio_by_sex.png"))
    plot_portfolio(clean, by='sex', save_path=out("portfolio_colored.png"))

    unscaled = [kmeans(clean, k, features=features, **kwargs) for k in config.unscaled_k]
    plot_cluster_grid(clean, unscaled, save_path=out("kmeans_unscaled.png"))

    scaled, params = z_scale(clean, features)
    logger.info(f"Scaling parameters:\n{scaling_table(params).to_string()}")
    plot_portfolio(scaled, by='sex', save_path=out("portfolio_scaled.png"))
    scaled_results = [kmeans(scaled, k, features=features, **kwargs) for k in config.scaled_k]
    plot_cluster_grid(scaled, scaled_results, save_path=out("kmeans_scaled.png"))
    elbow = inertia_table(scaled_results)
    logger.info(f"Inertia by k (scaled):\n{elbow.to_string(index=False)}")

    by_sex = cluster_by_group(scaled, 'sex', features, config.per_sex_k, groups=['m', 'f'], **kwargs)
    plot_cluster_grid(scaled, list(by_sex.values()), titles=[f"sex = {sex}" for sex in by_sex],
                      save_path=out("kmeans_by_sex.png"))
    for sex, result in by_sex.items():
        sex_data = scaled[scaled['sex'] == sex]
        logger.info(f"sex={sex}: silhouette {silhouette(sex_data, result):.3f}\n"
                    f"{summarize_clusters(clean, result).to_string(index=False)}")

    return {
        'n_removed': n_removed,
        'scaling': params,
        'unscaled': unscaled,
        'scaled': scaled_results,
        'elbow': elbow,
        'by_sex': by_sex,
    }


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    try:
        run_analysis(AnalysisConfig.from_env())
    except Exception as e:
        logger.error(f"Analysis failed: {e}")
        raise
