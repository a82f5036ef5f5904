"""
Routes Package
Exports all route blueprints
"""
from gradecore.routes.student import student_bp
from gradecore.routes.admin import admin_bp
from gradecore.routes.parent import parent_bp

__all__ = ['student_bp', 'admin_bp', 'parent_bp']
