from invoke import Collection

from legoworld.cli.batch_upload import batch_upload

ns = Collection(batch_upload)
