import math
from typing import Optional

import cv2
import numpy as np

from utils.config_sections import DisplayConfig


class CompassPanel:
    """Compass dial with an arrow rotated by -angle, so it keeps pointing north"""

    CARDINAL_POINTS = [
        (0, "N", (255, 255, 255)),
        (90, "E", (150, 150, 150)),
        (180, "S", (150, 150, 150)),
        (270, "W", (150, 150, 150)),
    ]

    def __init__(self, config: Optional[DisplayConfig] = None):
        self.config = config or DisplayConfig()
        self.size = self.config.panel_size
        self.center = self.size // 2
        self.radius = self.size // 2 - 30

    @staticmethod
    def format_text(angle: Optional[float], direction: Optional[str]) -> str:
        """Text shown under the dial: "<angle>  <direction>" """
        if angle is None:
            return ""
        return f"{angle}  {direction or ''}".rstrip()

    @staticmethod
    def arrow_rotation(angle: Optional[float]) -> float:
        """Clockwise screen rotation of the arrow in degrees"""
        return 0.0 if angle is None else -float(angle)

    def arrow_tip(self, angle: Optional[float]) -> tuple:
        """Pixel position of the arrow tip for the given heading"""
        rotation = math.radians(self.arrow_rotation(angle))
        length = self.radius * 0.85
        tip_x = self.center + int(round(length * math.sin(rotation)))
        tip_y = self.center - int(round(length * math.cos(rotation)))
        return tip_x, tip_y

    def render(self, angle: Optional[float], direction: Optional[str]) -> np.ndarray:
        """
        Draw the compass panel

        Args:
            angle: Heading in degrees (None before the first update)
            direction: Compass label for the heading

        Returns:
            BGR image of size (panel_size + 40, panel_size)
        """
        panel = np.zeros((self.size + 40, self.size, 3), dtype=np.uint8)
        panel[:] = self.config.background_color

        cv2.circle(panel, (self.center, self.center), self.radius, (100, 100, 100), 2)

        # Cardinal markers rotate with the arrow
        for bearing, label, color in self.CARDINAL_POINTS:
            marker_rad = math.radians(bearing + self.arrow_rotation(angle))
            label_x = self.center + int((self.radius + 15) * math.sin(marker_rad))
            label_y = self.center - int((self.radius + 15) * math.cos(marker_rad))
            cv2.putText(panel, label, (label_x - 6, label_y + 6),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1)

        if angle is None:
            cv2.putText(panel, "NO DATA", (self.center - 40, self.center + 5),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 0, 255), 1)
            return panel

        cv2.arrowedLine(panel, (self.center, self.center), self.arrow_tip(angle),
                        self.config.arrow_color, 3, tipLength=0.2)

        cv2.putText(panel, self.format_text(angle, direction), (10, self.size + 25),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.7, self.config.text_color, 2)
        return panel

    def render_paused(self) -> np.ndarray:
        """Placeholder shown while the compass runs in background mode"""
        panel = np.zeros((self.size + 40, self.size, 3), dtype=np.uint8)
        panel[:] = self.config.background_color
        cv2.putText(panel, "BACKGROUND", (self.center - 55, self.center - 5),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 200, 255), 1)
        cv2.putText(panel, "b: show  s: stop", (self.center - 65, self.center + 20),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.45, (150, 150, 150), 1)
        return panel
