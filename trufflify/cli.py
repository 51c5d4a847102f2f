import argparse
import os
import sys
from trufflify.config import EvolutionConfig
from trufflify.core import runner, utils
from trufflify.core.mutation import MutationEngine
from trufflify.visualization.display import FrameCollector


def build_parser() -> argparse.ArgumentParser:
    defaults = EvolutionConfig()
    parser = argparse.ArgumentParser(description="Trufflify - paint any image into the truffle, one translucent disc at a time.")
    parser.add_argument("-f", "--file", required=True, help="Path to input image")
    parser.add_argument("--target", default=defaults.target_path, help="Path to target image")
    parser.add_argument("--frames", type=int, default=300, help="Number of frames to run (0 = until Ctrl-C)")
    parser.add_argument("--iterations", type=int, default=defaults.iterations_per_frame, help="Mutations tried per frame")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: OS entropy)")
    parser.add_argument("--out", default="out_trufflify", help="Output directory")
    parser.add_argument("--output", default=defaults.output_name, help="Output image file name")
    parser.add_argument("--gif", action="store_true", help="Also write a progress GIF")
    parser.add_argument("--fps", type=int, default=12, help="GIF frame rate")
    parser.add_argument("--resume", default=None, help="Continue from a checkpoint .npz")
    parser.add_argument("--quiet", action="store_true", help="No progress output")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    verbose = not args.quiet
    if args.frames < 0:
        print("--frames must be >= 0", file=sys.stderr)
        return 2

    try:
        cfg = EvolutionConfig(iterations_per_frame=args.iterations, target_path=args.target, output_name=args.output)
    except ValueError as exc:
        print(f"invalid settings: {exc}", file=sys.stderr)
        return 2

    if verbose:
        print("Loading images...")
    try:
        current, target = utils.load_pair(args.file, cfg.target_path)
    except utils.ImageLoadError as exc:
        print(f"{exc}, aborting", file=sys.stderr)
        return 1

    meta = {}
    if args.resume:
        try:
            current.pixels[:] = utils.load_checkpoint(args.resume, target.width, target.height)
            meta = utils.checkpoint_meta(args.resume)
        except (OSError, ValueError, KeyError) as exc:
            print(f"cannot resume from {args.resume}: {exc}", file=sys.stderr)
            return 1

    os.makedirs(args.out, exist_ok=True)
    engine = MutationEngine(target, current, seed=args.seed, config=cfg)
    engine.trials = meta.get("trials", 0)
    engine.accepted = meta.get("accepted", 0)

    collector = None
    frame_cb = None
    if args.gif:
        collector = FrameCollector(out_dir=None, keep_frames=True, background=cfg.background)
        frame_cb = collector.callback

    frames = args.frames or None
    if verbose:
        print(f"Evolving {target.width}x{target.height} image, {cfg.iterations_per_frame} mutations per frame...")
    stats = runner.run_evolution(
        engine,
        frames,
        frame_callback=frame_cb,
        frame_interval=max(1, (frames or 300) // 60),
        first_frame=meta["frame"] + 1 if "frame" in meta else 0,
        checkpoint_path=runner.default_checkpoint_path(args.out, engine),
        verbose=verbose,
    )

    out_path = os.path.join(args.out, cfg.output_name)
    utils.save_image(engine.snapshot(), out_path)
    if collector is not None and collector.frames:
        gif_path = os.path.join(args.out, "trufflify.gif")
        collector.save_gif(gif_path, fps=args.fps)
        if verbose:
            print(f"Saved GIF to {gif_path}")

    if verbose:
        print(
            f"Done! {stats['accepted']}/{stats['trials']} mutations kept, "
            f"error {stats['initial_error']} -> {stats['final_error']}, "
            f"mean dE2000 {engine.perceptual_error():.2f}, "
            f"{stats['duration_s']:.2f}s"
        )
        print(f"Saved image to {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
