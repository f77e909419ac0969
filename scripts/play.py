#!/usr/bin/env python3
"""
建造脚本

Usage:
    python scripts/play.py --mode watch                 # 观看 AI 建造
    python scripts/play.py --mode play                  # 亲自建造
    python scripts/play.py --mode watch --agent greedy --shop rooms.json
"""
import argparse
import logging
import sys
from pathlib import Path
import time

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from core.catalog import load_rooms
from env import CastleEnv, EnvConfig, render_castle
from evaluation import RandomAgent, GreedyTreasureAgent

logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)

# 一次最多列出的动作数
MAX_LISTED_ACTIONS = 30


def parse_args():
    parser = argparse.ArgumentParser(description="Castle Play")

    parser.add_argument(
        "--mode",
        type=str,
        default="watch",
        choices=["watch", "play"],
        help="Mode: watch an agent build or build yourself",
    )
    parser.add_argument(
        "--agent",
        type=str,
        default="greedy",
        choices=["random", "greedy"],
        help="Agent type for watch mode",
    )
    parser.add_argument("--shop", type=str, help="JSON file with shop rooms")
    parser.add_argument("--delay", type=float, default=1.0, help="Delay between moves")
    parser.add_argument("--games", type=int, default=1, help="Number of games")
    parser.add_argument("--max-steps", type=int, default=100, help="Max steps per game")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")

    return parser.parse_args()


def build_config(args) -> EnvConfig:
    """根据命令行参数创建环境配置"""
    if args.shop:
        return EnvConfig(shop=load_rooms(args.shop))
    return EnvConfig()


def print_castle_state(env: CastleEnv, info: dict):
    """打印城堡状态"""
    print("\n" + "=" * 60)
    print(render_castle(env.state))
    print(f"Turn: {info.get('turn', 0)}")
    if env.state.damage > 0:
        print(f"必须弃置房间! 待处理伤害: {env.state.damage}")
    print("=" * 60)


def create_agent(args):
    """创建智能体"""
    if args.agent == "random":
        return RandomAgent("Random", seed=args.seed)
    return GreedyTreasureAgent("Greedy")


def print_game_over(env: CastleEnv, step: int):
    print("\n" + "=" * 60)
    if env.state.is_lost():
        print("城堡失守!")
    else:
        print(f"建造结束! 宝藏: {env.state.get_treasure()}")
    print(f"总步数: {step}")
    print("=" * 60)


def watch_game(args):
    """观看 AI 建造"""
    env = CastleEnv(config=build_config(args))
    agent = create_agent(args)

    for game_idx in range(args.games):
        print(f"\n{'='*60}")
        print(f"Game {game_idx + 1}/{args.games}")
        print("=" * 60)

        agent.reset()
        obs, info = env.reset(seed=args.seed)
        done = False
        step = 0

        while not done and step < args.max_steps:
            print_castle_state(env, info)

            legal_actions = env.get_legal_actions()
            action = agent.act(obs, legal_actions, env.state)

            print(f"\n{agent.name}: {action}")

            obs, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated
            step += 1

            time.sleep(args.delay)

        print_castle_state(env, info)
        print_game_over(env, step)


def play_game(args):
    """亲自建造"""
    env = CastleEnv(config=build_config(args))

    for game_idx in range(args.games):
        print(f"\n{'='*60}")
        print(f"Game {game_idx + 1}/{args.games}")
        print("=" * 60)

        obs, info = env.reset(seed=args.seed)
        done = False
        step = 0

        while not done and step < args.max_steps:
            print_castle_state(env, info)

            legal_actions = env.get_legal_actions()
            print("\n可选动作:")
            for i, action in enumerate(legal_actions[:MAX_LISTED_ACTIONS]):
                print(f"  {i}: {action}")
            if len(legal_actions) > MAX_LISTED_ACTIONS:
                print(f"  ... 还有 {len(legal_actions) - MAX_LISTED_ACTIONS} 个动作")

            while True:
                try:
                    choice = input("\n请选择动作编号 (或输入 'q' 退出): ")
                    if choice.lower() == 'q':
                        print("退出游戏")
                        return
                    idx = int(choice)
                    if 0 <= idx < len(legal_actions):
                        action = legal_actions[idx]
                        break
                    else:
                        print("无效选择，请重试")
                except ValueError:
                    print("请输入数字")

            obs, reward, terminated, truncated, info = env.step(action)
            if "error" in info:
                print(f"动作失败: {info['error']}")
            done = terminated or truncated
            step += 1

        print_castle_state(env, info)
        print_game_over(env, step)


def main():
    args = parse_args()

    print("=" * 60)
    print("Castle 城堡建造")
    print("=" * 60)

    if args.mode == "watch":
        watch_game(args)
    elif args.mode == "play":
        play_game(args)


if __name__ == "__main__":
    main()
