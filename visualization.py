# visualization.py
"""
Paints the simulation's draw commands using Pygame.
"""
import logging
import pygame
from typing import List, Optional, Tuple
from constants import BACKGROUND_COLOR, DEFAULT_WINDOW_SIZE, FULLSCREEN, WINDOW_TITLE
from draw_commands import Circle, DrawCommand, Line


# --- Data Contracts ---
#
# class Visualizer:
#   - __init__(self, size: Optional[Tuple[int, int]] = None):
#     - Inputs:
#       - size: Window size. DEFAULT_WINDOW_SIZE if None. Ignored in
#         fullscreen mode.
#     - Side Effects: Initializes Pygame and creates a display surface.
#
#   - viewport -> Tuple[int, int]: current drawable size.
#   - cursor_position() -> Optional[Tuple[int, int]]: None while the
#     pointer is outside the window.
#   - tick(fps: int) -> float: seconds elapsed since the previous tick.
#   - draw(self, commands: List[DrawCommand]) -> bool:
#     - Outputs:
#       - bool: False if the user has quit, True otherwise.
#     - Side Effects: Handles Pygame events (quit, ESC, resize) and paints
#       the commands in order onto the screen.

class Visualizer:
    """
    Host renderer for the point field: owns the window, reports input and
    paints draw commands.
    """
    def __init__(self, size: Optional[Tuple[int, int]] = None):
        """
        Initializes Pygame and the display window.
        """
        pygame.init()

        if FULLSCREEN:
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width, height = size if size is not None else DEFAULT_WINDOW_SIZE
            self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)

        # Lines carry per-pixel alpha, so they are painted onto a
        # transparent overlay which is then blitted over the points.
        self.overlay = self._create_overlay(width, height)

        pygame.display.set_caption(WINDOW_TITLE)
        self.clock = pygame.time.Clock()

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}).")

    @staticmethod
    def _create_overlay(width: int, height: int) -> pygame.Surface:
        return pygame.Surface((width, height), pygame.SRCALPHA)

    @property
    def viewport(self) -> Tuple[int, int]:
        return self.screen.get_size()

    def cursor_position(self) -> Optional[Tuple[int, int]]:
        if not pygame.mouse.get_focused():
            return None
        return pygame.mouse.get_pos()

    def tick(self, fps: int) -> float:
        """Waits for the next frame and returns the elapsed time in seconds."""
        return self.clock.tick(fps) / 1000.0

    def _handle_events(self) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False

            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                logging.info("ESC key pressed. Shutting down visualizer.")
                return False

            if event.type == pygame.VIDEORESIZE:
                # Points are kept; the next frame wraps them into the new size.
                self.overlay = self._create_overlay(*self.viewport)
                logging.info(f"Window resized to {self.viewport[0]}x{self.viewport[1]}.")
        return True

    def draw(self, commands: List[DrawCommand]) -> bool:
        """
        Handles events and paints one frame.

        Returns:
            bool: False if the application should exit, True otherwise.
        """
        if not self._handle_events():
            return False

        self.screen.fill(BACKGROUND_COLOR)
        self.overlay.fill((0, 0, 0, 0))

        for command in commands:
            if isinstance(command, Circle):
                center = (int(command.center[0]), int(command.center[1]))
                pygame.draw.circle(self.screen, command.color, center, int(command.radius))
            elif isinstance(command, Line):
                start, end = command.points
                # Pygame widths are whole pixels; sub-pixel strokes become 1px.
                pygame.draw.line(
                    self.overlay, command.color, start, end, max(int(command.width), 1)
                )

        self.screen.blit(self.overlay, (0, 0))
        pygame.display.flip()
        return True

    def close(self):
        """Shuts down Pygame."""
        pygame.quit()
