# backend/core/__init__.py
# 공통 모델/예외
