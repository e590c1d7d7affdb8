import click
from dataclasses import replace

from .chainable.basex import LogManager, FileNotOpenable, VideoMetadata
from .chainable.filterx import FilterId
from .chainable.resizex import FrameResizer
from .params import (
    EditParameters, SessionSettings, MenuOption, MENU_TEXT, VALID_ROTATIONS,
    default_parameters, parse_menu_choice, resolve_trim,
)
from .session import EditSession


class MenuChoice(click.ParamType):
    name = 'menu'

    def convert(self, value, param, ctx):
        if isinstance(value, list):
            return value
        try:
            return parse_menu_choice(str(value))
        except ValueError as e:
            self.fail(str(e), param, ctx)


class FourCC(click.ParamType):
    name = 'fourcc'

    def convert(self, value, param, ctx):
        if value is None:
            return None
        if len(value) != 4:
            self.fail(f'{value} is not a four character code (e.g. XVID, MJPG)', param, ctx)
        return value


def prompt_trim(params: EditParameters, metadata: VideoMetadata) -> EditParameters:
    start_seconds = click.prompt("Enter the start time (in seconds)", type=float)
    end_seconds = click.prompt("Enter the end time (in seconds)", type=float)
    # An invalid window is reported by resolve_trim and widened to the whole video
    start, end = resolve_trim(start_seconds, end_seconds, metadata.fps, metadata.frame_count)
    return replace(params, trim_start_frame=start, trim_end_frame=end)


def prompt_rotation(params: EditParameters, metadata: VideoMetadata) -> EditParameters:
    angle = click.prompt(
        "Enter rotation angle (0, 90, 180, 270)",
        type=click.Choice([str(a) for a in VALID_ROTATIONS]),
        show_choices=False
    )
    return replace(params, rotation_angle=int(angle))


def prompt_resize(params: EditParameters, metadata: VideoMetadata) -> EditParameters:
    width = click.prompt("Enter new width for the video (or 0 to keep original size)",
                         type=click.IntRange(min=0))
    height = click.prompt("Enter new height for the video (or 0 to keep original size)",
                          type=click.IntRange(min=0))
    return replace(params, target_width=width, target_height=height)


def prompt_filter(params: EditParameters, metadata: VideoMetadata) -> EditParameters:
    click.echo("Select a filter to apply:")
    click.echo("1 - Grayscale\n2 - Blur")
    choice = click.prompt("Enter your choice", type=click.IntRange(1, 2))
    return replace(params, filter_id=FilterId.from_menu(choice))


def prompt_text(params: EditParameters, metadata: VideoMetadata) -> EditParameters:
    text = click.prompt("Enter the text to display on the video", default="", show_default=False)
    return replace(params, overlay_text=text)


PROMPTS = {
    MenuOption.TRIM: prompt_trim,
    MenuOption.ROTATE: prompt_rotation,
    MenuOption.RESIZE: prompt_resize,
    MenuOption.FILTER: prompt_filter,
    MenuOption.TEXT: prompt_text,
}


def prompt_parameters(metadata: VideoMetadata) -> EditParameters:
    """Show the options menu and prompt for each selected option."""
    click.echo("\nChoose video processing options:")
    click.echo(MENU_TEXT)
    options = click.prompt("Enter your choice (press 0 to skip, e.g. 2,4 for several)",
                           type=MenuChoice(), default="0", show_default=False)

    params = default_parameters(metadata)
    for option in options:
        params = PROMPTS[option](params, metadata)
    return params


@click.command()
@click.option('--codec', '-c', default='mpeg4', show_default=True,
              help='FFmpeg encoder for the output video (mpeg4, libx264, mjpeg, ...).')
@click.option('--fourcc', type=FourCC(), default=None,
              help='Four character codec tag stored in the output container (e.g. XVID).')
@click.option('--interpolation', type=click.Choice(sorted(FrameResizer.INTERPOLATIONS)), default='lanczos',
              show_default=True, help='Interpolation used when resizing.')
@click.option('--no-preview', is_flag=True, default=False, help='Do not open the preview window.')
@click.option('--delay', '-d', type=click.IntRange(min=1), default=30, show_default=True,
              help='Preview pause after each frame in milliseconds.')
@click.option('--log-dir', type=click.Path(file_okay=False), default='logs', show_default=True,
              help='Directory for the run log file.')
@click.pass_context
def main(ctx, codec, fourcc, interpolation, no_preview, delay, log_dir):
    """Interactive video editor: trim, rotate, resize, filter and caption a video."""
    settings = SessionSettings(
        codec=codec,
        codec_tag=fourcc,
        preview=not no_preview,
        preview_delay_ms=delay,
    )

    video_path = click.prompt("Enter the video file path")
    output_path = click.prompt("Enter the output file path (including .avi extension)")

    LogManager.initialize(log_dir)
    LogManager.log_info('CLI', f'Input: {video_path}, output: {output_path}, settings: {settings}')

    exit_code = 0
    session = EditSession(video_path, output_path, settings=settings)
    try:
        try:
            metadata = session.load()
        except FileNotOpenable as e:
            click.echo("Error: Could not open video file.", err=True)
            click.echo(f"  {e}", err=True)
            exit_code = 1
        else:
            click.echo(f'Loaded video: {metadata.frame_count} frames, '
                       f'{metadata.width}x{metadata.height}, {metadata.fps:.2f} fps')

            params = prompt_parameters(metadata)
            session.resolve(params, interpolation=interpolation)
            if not no_preview:
                click.echo("Press 'q' or ESC in the preview window to stop early.")

            result = session.run()
            if result.error:
                click.echo(f"Error: {result.error}", err=True)
            else:
                if result.cancelled:
                    click.echo("Video playback interrupted by user.")
                if result.frames_skipped:
                    click.echo(f"Warning: skipped {result.frames_skipped} empty frames.", err=True)
                click.echo(f"Processed video saved to: {output_path} "
                           f"({result.frames_written} frames, {result.output_size[0]}x{result.output_size[1]})")
    finally:
        session.close()
        LogManager.log_info('CLI', f'Exiting with code {exit_code}')
        log_path = LogManager.get_log_file_path()
        LogManager.cleanup()

    click.echo(f'Log available at: {log_path}')
    ctx.exit(exit_code)


if __name__ == '__main__':
    main()
