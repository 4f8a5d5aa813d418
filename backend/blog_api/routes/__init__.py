# Routes package init
"""
Blog API — Routes Package
===========================

Route Inventory:
    - health.py:  GET  /                     (liveness text)
                  GET  /health               (status + timestamp)
    - blogs.py:   GET  /blogs                (list all)
                  POST /blogs                (create)
                  GET/PUT/DELETE /blog/id/{blog_id}
                  GET  /blog/author?name=    (author search)

Routes stay thin: parse input, call BlogService, shape the envelope.
"""
