#!/usr/bin/env python3

"""
Main Startup Module

Simply call main(args) to start the emulator, replacing args with a dictionary
of options.  This can be done via the Terminal or GUI.

All options must be supplied.  Defaults can be specified with a 'None'.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare, (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"

from time import perf_counter, sleep
from .constants import (
    APP_INTRO, APP_COPYRIGHT, DEFAULT_CLOCK_SPEED, DEFAULT_KEYMAP, EVENT_NONE, FRAME_INTERVAL
)
from .debugger import Debugger
from .hostio import LoadError
from .machine import Machine


class StartupError(Exception):
    pass


def _load_plugins(opt_renderer, mute_audio):
    # flake8: noqa: F401
    # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
    if opt_renderer is None or opt_renderer == "pygame":
        try:
            import pygame
        except ImportError:
            if opt_renderer is not None:
                raise StartupError("PyGame does not appear to be installed.")

            opt_renderer = "null"
            print("PyGame does not appear to be installed.  Running without a display.")
        else:
            from .inputs.i_pygame import Inputs
            from .renderers.r_pygame import Renderer

            if mute_audio:
                from .audio.a_null import Audio
            else:
                from .audio.a_pygame import Audio

    if opt_renderer == "null":
        from .inputs.i_null import Inputs
        from .renderers.r_null import Renderer
        from .audio.a_null import Audio

    return Renderer, Inputs, Audio


def run_loop(machine, inputs, audio, max_frames=None):
    # Runs frames at 60Hz until the machine halts.  Returns the number of frames run.
    run_state = machine.run_state
    framebuffer = machine.framebuffer
    next_frame_time = perf_counter()
    next_perf_report_time = 0
    perf_counter_fps = 0
    perf_counter_ops = 0
    frames = 0

    while not machine.is_halted():
        if max_frames is not None and frames >= max_frames:
            break

        this_time = perf_counter()

        # Performance counters.  Reporting is done before a refresh, as refreshing will likely show the report.
        if this_time >= next_perf_report_time:
            next_perf_report_time = int(this_time) + 1.0
            framebuffer.report_perf(perf_counter_fps, perf_counter_ops)
            perf_counter_fps = 0
            perf_counter_ops = 0

        event = inputs.process_messages()

        if event != EVENT_NONE:
            was_paused = run_state.is_paused()
            machine.handle_event(event)

            if run_state.is_halted():
                print("Exiting.")
            elif run_state.is_paused() != was_paused:
                print("Paused." if run_state.is_paused() else "Resumed.")

        perf_counter_ops += machine.tick()
        audio.enable_buzzer(machine.sound_active() and run_state.is_running())
        framebuffer.refresh_display()
        perf_counter_fps += 1
        frames += 1

        # Wait for the next frame.  If we've lagged behind, don't try to catch up.
        next_frame_time = max(next_frame_time + FRAME_INTERVAL, this_time)
        delay = next_frame_time - perf_counter()

        if delay > 0:
            sleep(delay)

    return frames


def main(args):
    print("".join((APP_INTRO, APP_COPYRIGHT)))

    opt_renderer = args["renderer"]

    if opt_renderer not in (None, "pygame", "null"):
        raise StartupError("Unknown renderer: {}".format(opt_renderer))

    Renderer, Inputs, Audio = _load_plugins(opt_renderer, args["mute"])

    renderer = Renderer(
        scale=args["scale"],
        fg_colour=args["fg_colour"],
        bg_colour=args["bg_colour"],
        pixel_outlines=bool(args["pixel_outlines"])
    )

    inputs = audio = None

    try:
        # Set up debugger and live output if necessary
        debugger = Debugger()
        debugger.set_live(args["debug"])

        clock_speed = args["clock_speed"]

        if clock_speed is not None and clock_speed <= 0:
            raise StartupError("Clock speed must be a positive number of instructions per second.")

        machine = Machine(
            renderer=renderer, debugger=debugger,
            clock_speed=DEFAULT_CLOCK_SPEED if clock_speed is None else clock_speed
        )

        # Host inputs push key states straight into the machine's keypad
        inputs = Inputs(args["keymap"] or DEFAULT_KEYMAP, machine.keypad)
        audio = Audio()

        try:
            machine.load_file(args["filename"])
        except LoadError as e:
            print(e)
            return 1

        run_loop(machine, inputs, audio)

        reason = machine.get_halt_reason()

        if reason is not None:
            print(reason)
            return 1

        return 0
    finally:
        # The machine has stopped, so shut down the host plugins.  __del__ cannot be relied upon when using PyPy
        if audio is not None:
            audio.shutdown()

        if inputs is not None:
            inputs.shutdown()

        renderer.shutdown()
