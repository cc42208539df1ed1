from bot.handlers.form import router as form_router
from bot.handlers.menu import router as menu_router
from bot.handlers.recipe import router as recipe_router
from bot.handlers.start import router as start_router

__all__ = ["form_router", "menu_router", "recipe_router", "start_router"]
