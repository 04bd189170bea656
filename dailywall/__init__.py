"""
dailywall

Keep a Hyprland desktop's wallpaper in sync with Bing's picture of the day.
"""

__version__ = "0.3.0"
