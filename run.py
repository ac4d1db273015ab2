import logging
import uvicorn
from models import AgentConfig
from api.webhook import create_app

config = AgentConfig.from_env()
logging.basicConfig(level=config.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s :: %(message)s")

application = create_app(config=config)

if __name__ == "__main__":
    uvicorn.run(
        "run:application",
        host="0.0.0.0",
        port=8000
    )
