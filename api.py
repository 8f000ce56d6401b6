from __future__ import annotations

import os
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from doc2readme.config import Settings, load_settings
from doc2readme.errors import Doc2ReadmeError
from doc2readme.model import DocumentationNode
from doc2readme.render import load_template, render
from doc2readme.walk import build_project_doc


app = FastAPI(title="doc2readme")


class PackageRequest(BaseModel):
	root_path: str
	module_path: Optional[str] = None
	exclude: List[str] = []
	strict: Optional[bool] = None


class ReadmeRequest(PackageRequest):
	template: Optional[str] = None


class ReadmeResponse(BaseModel):
	markdown: str


def _settings(req: PackageRequest) -> Settings:
	root = os.path.abspath(req.root_path)
	if not os.path.isdir(root):
		raise HTTPException(status_code=400, detail=f"Invalid root_path: {root}")
	try:
		return load_settings(root).merged(
			module_path=req.module_path,
			exclude=req.exclude or None,
			strict=req.strict,
			template=getattr(req, "template", None),
		)
	except Doc2ReadmeError as e:
		raise HTTPException(status_code=400, detail=str(e)) from e


@app.post("/package", response_model=DocumentationNode)
def package(req: PackageRequest) -> DocumentationNode:
	settings = _settings(req)
	try:
		return build_project_doc(os.path.abspath(req.root_path), settings)
	except Doc2ReadmeError as e:
		raise HTTPException(status_code=400, detail=str(e)) from e


@app.post("/readme", response_model=ReadmeResponse)
def readme(req: ReadmeRequest) -> ReadmeResponse:
	settings = _settings(req)
	try:
		node = build_project_doc(os.path.abspath(req.root_path), settings)
		return ReadmeResponse(markdown=render(node, load_template(settings.template)))
	except Doc2ReadmeError as e:
		raise HTTPException(status_code=400, detail=str(e)) from e


def create_app() -> FastAPI:
	return app
