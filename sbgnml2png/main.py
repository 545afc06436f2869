"""
CLI entry point

Renders SBGN-ML files to PNG and SVG
"""
import sys
import argparse
from pathlib import Path

from sbgnml2png.config import RenderConfig, UNSUPPORTED_POLICIES
from sbgnml2png.errors import SbgnRenderError
from sbgnml2png.logger import ConversionLogger
from sbgnml2png.pipeline import render_file


def main():
    """Main function"""
    parser = argparse.ArgumentParser(
        description='Render SBGN-ML files to PNG and SVG',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sbgnml2png input.sbgn output.png
  sbgnml2png input.sbgn output.png --svg diagram.svg
  sbgnml2png input.sbgn output.png --padding 20
  sbgnml2png input.sbgn output.png --on-unsupported skip
        """
    )
    parser.add_argument('input', type=str, help='Path to input SBGN-ML file')
    parser.add_argument('output', type=str, help='Path to output PNG file')
    parser.add_argument('--svg', dest='svg_output', type=str, default=None,
                        help='Path to output SVG file (default: output path with .svg suffix)')
    parser.add_argument('--padding', type=float, default=None,
                        help='Canvas padding in pixels (default: 10)')
    parser.add_argument('--no-clone-markers', dest='clone_markers', action='store_false',
                        help='Do not draw clone markers')
    parser.add_argument('--on-unsupported', dest='on_unsupported', choices=UNSUPPORTED_POLICIES,
                        default='abort',
                        help='What to do with unsupported glyph/arc classes (default: abort)')

    args = parser.parse_args()

    input_path = Path(args.input)
    output_path = Path(args.output)
    svg_path = Path(args.svg_output) if args.svg_output else output_path.with_suffix('.svg')

    if not input_path.exists():
        print(f"Input file not found: {input_path}")
        sys.exit(1)

    if args.padding is not None and args.padding < 0:
        print(f"Error: padding must be non-negative, got {args.padding}")
        sys.exit(1)

    print(f"Parsing: {input_path}")

    try:
        config = RenderConfig(
            show_clone_markers=args.clone_markers,
            on_unsupported=args.on_unsupported,
        )
        if args.padding is not None:
            config.padding = args.padding

        logger = ConversionLogger()
        render_file(input_path, output_path, svg_path, config=config, logger=logger)
        print(f"Saved {output_path} and {svg_path}")

        # Display warnings
        warnings = logger.get_warnings()
        if warnings:
            print(f"\nWarnings ({len(warnings)}):")
            for warning in warnings:
                print(f"  - [{warning.element_id}] {warning.message}")

    except SbgnRenderError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
