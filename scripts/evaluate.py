#!/usr/bin/env python3
"""
评估脚本

Usage:
    python scripts/evaluate.py --agent greedy --games 100
    python scripts/evaluate.py --compare --agent1 greedy --agent2 random
    python scripts/evaluate.py --agent random --shop rooms.json --output result.json
"""
import argparse
import logging
import sys
from pathlib import Path
import json

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from core.catalog import load_rooms
from env import CastleEnv, EnvConfig
from evaluation import Evaluator, RandomAgent, GreedyTreasureAgent

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)

AGENT_CHOICES = ["random", "greedy"]


def parse_args():
    parser = argparse.ArgumentParser(description="Castle Evaluation")

    # 模式
    parser.add_argument("--compare", action="store_true", help="Compare two agents")

    # 智能体
    parser.add_argument("--agent", type=str, default="greedy", choices=AGENT_CHOICES)
    parser.add_argument("--agent1", type=str, default="greedy", choices=AGENT_CHOICES)
    parser.add_argument("--agent2", type=str, default="random", choices=AGENT_CHOICES)

    # 评估参数
    parser.add_argument("--games", type=int, default=100, help="Number of games")
    parser.add_argument("--max-steps", type=int, default=200, help="Max steps per game")
    parser.add_argument("--shop", type=str, help="JSON file with shop rooms")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")

    # 其他
    parser.add_argument("--output", type=str, help="Output file for results")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")

    return parser.parse_args()


def create_agent(kind: str, name: str, seed=None):
    """创建智能体"""
    if kind == "random":
        return RandomAgent(name, seed=seed)
    return GreedyTreasureAgent(name)


def create_evaluator(args) -> Evaluator:
    config = EnvConfig(shop=load_rooms(args.shop)) if args.shop else EnvConfig()
    return Evaluator(env_fn=lambda: CastleEnv(config=config))


def evaluate_single(args):
    """评估单个智能体"""
    logger.info(f"Evaluating agent: {args.agent}")

    agent = create_agent(args.agent, args.agent, args.seed)
    evaluator = create_evaluator(args)
    result = evaluator.evaluate(
        agent=agent,
        n_games=args.games,
        max_steps=args.max_steps,
        verbose=args.verbose,
    )

    logger.info("=" * 50)
    logger.info("Evaluation Results")
    logger.info("=" * 50)
    logger.info(f"Average Treasure: {result.avg_treasure:.2f}")
    logger.info(f"Average Reward: {result.avg_reward:.2f}")
    logger.info(f"Average Length: {result.avg_length:.1f}")
    logger.info(f"Loss Rate: {result.loss_rate:.2%}")
    logger.info(f"Average Rooms: {result.avg_rooms:.1f}")
    logger.info(f"Average Links: {result.avg_links:.1f}")
    logger.info("=" * 50)

    if args.output:
        with open(args.output, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
        logger.info(f"Results saved to {args.output}")

    return result


def compare_agents(args):
    """比较两个智能体"""
    logger.info(f"Comparing agents: {args.agent1} vs {args.agent2}")

    agent1 = create_agent(args.agent1, "agent1", args.seed)
    agent2 = create_agent(args.agent2, "agent2", args.seed)

    evaluator = create_evaluator(args)
    result = evaluator.compare(agent1, agent2, n_games=args.games, max_steps=args.max_steps)

    logger.info("=" * 50)
    logger.info("Comparison Results")
    logger.info("=" * 50)
    logger.info(f"Agent 1 wins: {result['agent1_wins']} ({result['agent1_win_rate']:.2%})")
    logger.info(f"Agent 2 wins: {result['agent2_wins']} ({result['agent2_win_rate']:.2%})")
    logger.info(f"Draws: {result['draws']}")
    logger.info("=" * 50)

    if args.output:
        with open(args.output, "w") as f:
            json.dump(result, f, indent=2)

    return result


def main():
    args = parse_args()

    if args.games < 1:
        logger.error("--games must be at least 1")
        sys.exit(1)

    if args.compare:
        compare_agents(args)
    else:
        evaluate_single(args)


if __name__ == "__main__":
    main()
