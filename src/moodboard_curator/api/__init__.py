# FastAPI surface for the curation engine
