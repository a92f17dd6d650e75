"""Domain packages: router / service / repository / schemas per business area"""
